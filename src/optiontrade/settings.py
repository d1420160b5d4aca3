# src/optiontrade/settings.py
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import BaseModel
import os
import yaml


class ApiCfg(BaseModel):
    token: str | None = None
    account_number: str | None = None


class LogCfg(BaseModel):
    dir: str = "logs"
    console_level: str = "INFO"
    http_debug: bool = True  # 요청/응답 상태를 파일 로그에 남김


class BrokerCfg(BaseModel):
    name: str = "robinhood"
    base_url: str = "https://api.robinhood.com"
    timeout_s: int = 10


class Settings(BaseSettings):
    env: str = "dev"
    api: ApiCfg = ApiCfg()
    broker: BrokerCfg = BrokerCfg()
    log: LogCfg = LogCfg()

    # 실제 주문 전송 여부 (기본: 미리보기만)
    live: bool = False

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        env_nested_delimiter="__",  # 예: API__TOKEN
    )

    @classmethod
    def load(cls, path: str):
        with open(path, "r", encoding="utf-8") as f:
            cfg = yaml.safe_load(f) or {}

        # 환경변수 → YAML 설정에 주입 (토큰은 파일에 두지 않는 것을 권장)
        tok = os.getenv("ROBINHOOD_TOKEN")
        acct = os.getenv("ROBINHOOD_ACCOUNT_NUMBER")
        if tok or acct:
            cfg.setdefault("api", {})
            if tok:
                cfg["api"]["token"] = tok
            if acct:
                cfg["api"]["account_number"] = acct

        return cls.model_validate(cfg)
