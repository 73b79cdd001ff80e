import httpx
import logging
from typing import Optional
from app.config import config
from app.exceptions import GenerationCredentialError, GenerationError

logger = logging.getLogger(__name__)

NO_DESCRIPTION = "No description"
DEFAULT_QUESTION = "What does this company do?"

SYSTEM_PROMPT = (
    "You describe companies based on the content of their website. "
    "Answer the user's question concisely, in one sentence, in {language}, "
    "using only the site content provided."
)

USER_PROMPT = (
    "Domain: {domain}\n"
    "Question: {question}\n\n"
    "Website content:\n{snippet}"
)


class AIService:
    def __init__(self, api_key: Optional[str] = None, base_url: Optional[str] = None,
                 model_name: Optional[str] = None, client: Optional[httpx.AsyncClient] = None):
        self.api_key = api_key if api_key is not None else config.OPENAI_API_KEY
        self.model_name = model_name or config.AI_MODEL
        self.language = config.SUMMARY_LANGUAGE
        self.temperature = config.AI_TEMPERATURE
        self.max_tokens = config.AI_MAX_TOKENS
        # Use the provided base_url, or fall back to the config value
        target_url = base_url or config.AI_SERVICE_URL
        self.base_url = f"{target_url.rstrip('/')}/chat/completions"
        # One client for the lifetime of the process, closed on shutdown
        self.client = client or httpx.AsyncClient(timeout=60.0)

    async def aclose(self):
        await self.client.aclose()

    async def describe_company(self, snippet: str, domain: str, user_query: Optional[str] = None) -> str:
        """
        Asks the text-generation endpoint for a one-sentence answer to
        `user_query` about `domain`, grounded in the extracted site snippet.
        """
        if not self.api_key:
            raise GenerationCredentialError("OPENAI_API_KEY is not configured")

        payload = {
            "model": self.model_name,
            "messages": [
                {"role": "system", "content": SYSTEM_PROMPT.format(language=self.language)},
                {"role": "user", "content": USER_PROMPT.format(
                    domain=domain,
                    question=(user_query or "").strip() or DEFAULT_QUESTION,
                    snippet=snippet,
                )},
            ],
            "max_tokens": self.max_tokens,
            "temperature": self.temperature,
        }

        logger.info(f"Requesting description for {domain} ({len(snippet)} characters of content)")
        try:
            response = await self.client.post(
                self.base_url,
                json=payload,
                headers={"Authorization": f"Bearer {self.api_key}"},
            )
            if response.status_code in (401, 403):
                raise GenerationCredentialError(
                    f"OPENAI_API_KEY was rejected by the generation service (HTTP {response.status_code})"
                )
            response.raise_for_status()
            choices = response.json().get("choices") or []
            content = (choices[0].get("message") or {}).get("content") if choices else None
        except GenerationCredentialError:
            raise
        except Exception as e:
            logger.error(f"Description request for {domain} failed: {str(e)}")
            raise GenerationError(f"Summarization failed: {str(e) or type(e).__name__}") from e

        description = (content or "").strip()
        if not description:
            logger.warning(f"Empty description returned for {domain}")
            return NO_DESCRIPTION
        return description

ai_service = AIService()
