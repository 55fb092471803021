"""Factory for the optional local LLM used by the report writer.

``llama-cpp-python`` is an optional dependency: when it is not installed, or
the model file is missing, the factory returns ``None`` and the summary
pipeline uses the rule-based report.
"""

from __future__ import annotations

import logging
from pathlib import Path

logger = logging.getLogger(__name__)


def create_llm(
    model_path: str,
    n_ctx: int = 4096,
    n_gpu_layers: int = 0,
    verbose: bool = False,
    chat_format: str = "chatml",
) -> object | None:
    """Creates a llama-cpp Llama instance, or returns None if unavailable.

    Args:
        model_path:    Path to the ``.gguf`` model file.
        n_ctx:         Context window size (tokens).
        n_gpu_layers:  ``-1`` offloads all layers to the GPU; ``0`` for CPU.
        verbose:       Enable llama.cpp verbose logging.
        chat_format:   Chat template format (e.g. ``"chatml"``).

    Returns:
        A ``Llama`` instance ready for inference, or ``None`` when
        ``llama-cpp-python`` is not installed or the model file is missing.
    """
    if not model_path or not Path(model_path).is_file():
        logger.warning("LLM model %s not found — report writer disabled.", model_path)
        return None
    try:
        from llama_cpp import Llama

        return Llama(
            model_path=model_path,
            n_ctx=n_ctx,
            n_gpu_layers=n_gpu_layers,
            n_threads=4,
            verbose=verbose,
            chat_format=chat_format,
        )
    except ImportError:
        logger.warning("llama-cpp-python is not installed — report writer disabled.")
        return None
    except Exception as exc:
        logger.warning("Failed to load LLM from %s: %s — report writer disabled.", model_path, exc)
        return None
