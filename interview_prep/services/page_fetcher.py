import html
import re
from dataclasses import dataclass

import httpx

BLOCK_TAGS = (
    "p",
    "div",
    "li",
    "ul",
    "ol",
    "h1",
    "h2",
    "h3",
    "h4",
    "h5",
    "h6",
    "br",
    "tr",
    "section",
    "article",
)


@dataclass(frozen=True)
class FetchedPage:
    url: str
    final_url: str
    status_code: int
    board: str
    title: str
    text: str


def detect_board(url: str) -> str:
    lowered = (url or "").lower()
    if "linkedin.com" in lowered:
        return "linkedin"
    if "myworkdayjobs.com" in lowered or ".wd" in lowered:
        return "workday"
    if "greenhouse.io" in lowered:
        return "greenhouse"
    if "lever.co" in lowered:
        return "lever"
    if "smartrecruiters.com" in lowered:
        return "smartrecruiters"
    return "generic"


def extract_title(html_text: str) -> str:
    og_title = re.search(
        r"<meta[^>]+property=['\"]og:title['\"][^>]+content=['\"]([^'\"]+)['\"]",
        html_text,
        flags=re.IGNORECASE,
    )
    if og_title:
        return html.unescape(og_title.group(1)).strip()

    title_match = re.search(r"<title>(.*?)</title>", html_text, flags=re.IGNORECASE | re.DOTALL)
    if not title_match:
        return ""
    return html.unescape(re.sub(r"\s+", " ", title_match.group(1))).strip()


def strip_html_to_text(html_text: str) -> str:
    cleaned = re.sub(r"<script[\s\S]*?</script>", " ", html_text, flags=re.IGNORECASE)
    cleaned = re.sub(r"<style[\s\S]*?</style>", " ", cleaned, flags=re.IGNORECASE)
    for tag in BLOCK_TAGS:
        cleaned = re.sub(rf"</{tag}>", "\n", cleaned, flags=re.IGNORECASE)
    cleaned = re.sub(r"<br\s*/?>", "\n", cleaned, flags=re.IGNORECASE)
    cleaned = re.sub(r"<[^>]+>", " ", cleaned)
    cleaned = html.unescape(cleaned)
    cleaned = re.sub(r"[ \t]+", " ", cleaned)
    cleaned = re.sub(r"\n\s*\n+", "\n", cleaned)
    return cleaned.strip()


class PageFetcher:
    def __init__(
        self,
        *,
        timeout_seconds: int = 30,
        max_chars: int = 12000,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.timeout_seconds = timeout_seconds
        self.max_chars = max_chars
        self._transport = transport

    async def fetch(self, url: str) -> FetchedPage:
        """Fetch a posting and reduce it to plain text.

        Raises ``httpx.HTTPError`` on transport failures and non-2xx answers.
        """
        async with httpx.AsyncClient(
            follow_redirects=True,
            timeout=self.timeout_seconds,
            headers={"User-Agent": "Mozilla/5.0 (compatible; InterviewPrep/1.0)"},
            transport=self._transport,
        ) as client:
            response = await client.get(url)
            response.raise_for_status()

        return FetchedPage(
            url=url,
            final_url=str(response.url),
            status_code=response.status_code,
            board=detect_board(url),
            title=extract_title(response.text),
            text=strip_html_to_text(response.text)[: self.max_chars],
        )
