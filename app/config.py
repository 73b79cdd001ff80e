import os
from dotenv import load_dotenv

load_dotenv()

class Config:
    DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./domains.db")

    # OpenAI-compatible chat completions endpoint
    AI_SERVICE_URL = os.getenv("AI_SERVICE_URL", "https://api.openai.com/v1")
    OPENAI_API_KEY = os.getenv("OPENAI_API_KEY")
    AI_MODEL = os.getenv("AI_MODEL", "gpt-4o-mini")
    AI_TEMPERATURE = float(os.getenv("AI_TEMPERATURE", "0.7"))
    AI_MAX_TOKENS = int(os.getenv("AI_MAX_TOKENS", "150"))
    SUMMARY_LANGUAGE = os.getenv("SUMMARY_LANGUAGE", "English")

    FETCH_TIMEOUT_SECONDS = float(os.getenv("FETCH_TIMEOUT_SECONDS", "30"))
    FETCH_USER_AGENT = os.getenv(
        "FETCH_USER_AGENT",
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
    )
    SNIPPET_MAX_LENGTH = int(os.getenv("SNIPPET_MAX_LENGTH", "4000"))
    ERROR_MESSAGE_MAX_LENGTH = int(os.getenv("ERROR_MESSAGE_MAX_LENGTH", "300"))

    PROCESS_SCHEDULE = os.getenv("PROCESS_SCHEDULE", "* * * * *")
    AUTH_PASSWORD = os.getenv("AUTH_PASSWORD")

    SLACK_BOT_TOKEN = os.getenv("SLACK_BOT_TOKEN")
    SLACK_CHANNEL_JOB_STATUS = os.getenv("SLACK_CHANNEL_JOB_STATUS")
    SLACK_MENTIONS = os.getenv("SLACK_MENTIONS")

config = Config()
