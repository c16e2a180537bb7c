import os


class Settings:
    PROJECT_NAME: str = "flashlingo"
    DEBUG: bool = os.environ.get("FLASHLINGO_DEBUG", "0") == "1"
    LOG_DIR: str = os.environ.get("FLASHLINGO_LOG_DIR", "log")
    LOG_FILE: str = "flashlingo.log"
    LOG_TO_DB: bool = os.environ.get("FLASHLINGO_LOG_TO_DB", "0") == "1"
    DB_DIR: str = os.environ.get("FLASHLINGO_DB_DIR", "db")
    DB_FILE: str = "flashlingo.db"
    CATALOG_FILE: str = os.environ.get("FLASHLINGO_CATALOG", "data/vocabulary.json")
    PRIMARY_LANGUAGE: str = "french"
    SECONDARY_LANGUAGE: str = "german"
    REVIEW_BATCH_SIZE: int = 10
    HISTORY_LIMIT: int = 50
    STATIC_DIR: str = "static"
    ROOT_PATH: str = os.environ.get("ROOT_PATH", "")

    @property
    def db_path(self) -> str:
        return os.path.join(self.DB_DIR, self.DB_FILE)


settings = Settings()
