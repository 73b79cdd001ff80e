import re
from bs4 import BeautifulSoup, Comment
from app.config import config

_WHITESPACE = re.compile(r"\s+")


def extract_snippet(raw_content: str, max_length: int = None) -> str:
    """
    Converts a fetched page into plain text for the summarizer:
    script/style blocks and comments are dropped, tags stripped,
    whitespace collapsed and the result cut to max_length characters.
    """
    limit = max_length or config.SNIPPET_MAX_LENGTH
    if not raw_content:
        return ""

    # html.parser drops an unterminated "&word" at end of input, e.g. "AT&T"
    soup = BeautifulSoup(raw_content + "\n", "html.parser")
    for tag in soup(["script", "style"]):
        tag.decompose()
    for comment in soup.find_all(string=lambda text: isinstance(text, Comment)):
        comment.extract()

    text = _WHITESPACE.sub(" ", soup.get_text(" ")).strip()
    return text[:limit].rstrip()
