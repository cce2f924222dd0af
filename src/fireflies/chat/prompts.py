# Prompt assembly and reply formatting for the RAG commands.
# Created: 2026-10-03
#
# Replies are in Indonesian, the working language of the chat.

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from fireflies.tools.builtin.web_search import SearchResult

SEARCH_SOURCE_CHARS = 2000
SCRAPE_SOURCE_CHARS = 5000
PROMPT_CONTENT_CHARS = 8000

# -- usage hints -------------------------------------------------------------

SEARCH_USAGE = "Mohon masukkan kata kunci pencarian setelah /cari"
WEB_URL_USAGE = (
    "Mohon masukkan URL yang valid. "
    "Contoh: /web ambil fungsi yang ada di web https://example.com"
)
WEB_QUESTION_USAGE = (
    "Mohon masukkan pertanyaan sebelum URL. "
    "Contoh: /web ambil fungsi yang ada di web https://example.com"
)
CALCULATOR_USAGE = (
    "Mohon masukkan ekspresi matematika setelah /kalkulator "
    "(contoh: /kalkulator 2 + 2 * 5)"
)

# -- fixed replies -----------------------------------------------------------

NO_SEARCH_RESULTS = "❌ Maaf, saya tidak menemukan hasil yang relevan di internet."
SCRAPE_FAILED = "❌ Maaf, saya tidak dapat mengakses atau memproses konten dari URL tersebut."
NO_AI_RESPONSE = "Maaf, tidak ada respons dari AI."
EXPLANATION_UNAVAILABLE = "Maaf, tidak dapat memberikan penjelasan saat ini."
CONTEXT_CLEARED = "🧹 **Memory Cleared!** Context has been reset."
CONTEXT_CLEAR_FAILED = "❌ Failed to clear context. Please try again."
GENERATION_STOPPED = "🛑 **Generation stopped by user**"
GENERATION_FAILED = (
    "❌ Maaf, API LLM sedang mengalami error.\n\n"
    "💡 **Alternative:** Use /cari [query] for web search instead!"
)
DEFAULT_IMAGE_PROMPT = "Describe this image in detail in Indonesian language."

_SEARCH_INSTRUCTION = (
    "Berdasarkan konten lengkap dari website yang telah diunduh berikut, berikan "
    "jawaban informatif dan lengkap tentang topik yang ditanyakan. Jawab dalam "
    "Bahasa Indonesia dengan informasi yang akurat dan mendidik."
)
_SCRAPE_INSTRUCTION = (
    "Berdasarkan konten website berikut, jawab pertanyaan pengguna secara langsung "
    "dan detail. Jawab dalam Bahasa Indonesia."
)


def _cap(text: str, limit: int) -> str:
    return text if len(text) <= limit else text[:limit]


def build_search_prompt(
    results: Sequence[SearchResult],
    question: str,
    *,
    source_chars: int = SEARCH_SOURCE_CHARS,
    max_content_chars: int = PROMPT_CONTENT_CHARS,
) -> str:
    """Combine search results and the question into one bounded prompt."""
    blocks = []
    for i, result in enumerate(results, 1):
        blocks.append(
            f"\n--- WEBSITE {i}: {result.url} ---\n{_cap(result.content, source_chars)}\n\n"
        )
    combined = _cap("".join(blocks), max_content_chars)
    return (
        f"{_SEARCH_INSTRUCTION}\n\n"
        f"{combined}\n"
        f"--- PERTANYAAN PENGGUNA ---\n{question}\n\n"
        "Berikan jawaban yang informatif dan lengkap berdasarkan konten website "
        "yang telah diunduh:"
    )


def build_scrape_prompt(
    content: str,
    question: str,
    *,
    source_chars: int = SCRAPE_SOURCE_CHARS,
) -> str:
    """Prompt for answering *question* from a single page."""
    return (
        f"{_SCRAPE_INSTRUCTION}\n\n"
        f"--- KONTEN WEBSITE ---\n{_cap(content, source_chars)}\n\n"
        f"--- PERTANYAAN PENGGUNA ---\n{question}\n\n"
        "Jawab berdasarkan konten website:"
    )


def build_calculator_prompt(expression: str, result: str) -> str:
    return (
        f"Pengguna melakukan perhitungan: {expression} = {result}. "
        "Berikan penjelasan singkat tentang perhitungan ini dalam Bahasa Indonesia, "
        "termasuk langkah-langkah jika perlu."
    )


def format_search_answer(answer: str, sources: Sequence[str]) -> str:
    """Append the sources section, one URL per line."""
    return f"{answer}\n\n📖 **Sumber:**\n" + "\n".join(sources)


def format_scrape_answer(answer: str, url: str) -> str:
    return f"{answer}\n\n🌐 **Sumber:** {url}"


def format_calculation(expression: str, result: str, explanation: str | None = None) -> str:
    text = f"🔢 **Hasil Perhitungan:**\n\n{expression} = **{result}**"
    if explanation is not None:
        text += f"\n\n📝 **Penjelasan:**\n{explanation}"
    return text


def chat_title(text: str) -> str:
    """Chat title derived from the first message."""
    return text[:50] + "..." if len(text) > 50 else text
