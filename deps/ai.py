from functools import lru_cache
from typing import Optional

from ai import OpenAITextGenerator, TextGenerator


@lru_cache(maxsize=1)
def _default_generator() -> OpenAITextGenerator:
    return OpenAITextGenerator()


def get_text_generator() -> Optional[TextGenerator]:
    """
    The AI collaborator for this request. Tests override this dependency with a
    deterministic stub; returning None means "always use canned content".
    """
    return _default_generator()
