"""
Prompt files.

Prompts are plain markdown files in this directory. load_prompts() reads
them once (at startup) into an immutable Prompts record; the core functions
receive the individual strings as parameters.

File names map to fields: deduplicate-values.md -> Prompts.deduplicate_values
"""

import logging
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Optional, Union

from ..config import get_settings

logger = logging.getLogger(__name__)

PROMPTS_DIR = Path(__file__).parent


@dataclass(frozen=True)
class Prompts:
    deduplicate_values: str
    deduplicate_contexts: str
    find_existing_duplicate: str
    find_existing_context: str
    best_values_card: str
    generate_upgrades: str
    generate_value: str
    generate_contexts: str


def load_prompts(directory: Optional[Union[str, Path]] = None) -> Prompts:
    """
    Read every prompt file from `directory`.

    Defaults to Settings.prompts_dir, then to the packaged prompts.

    Raises:
        FileNotFoundError: a prompt file is missing
    """
    if directory is None:
        directory = get_settings().prompts_dir
    directory = Path(directory) if directory else PROMPTS_DIR

    texts = {}
    for f in fields(Prompts):
        path = directory / f"{f.name.replace('_', '-')}.md"
        if not path.is_file():
            raise FileNotFoundError(f"Prompt file not found: {path}")
        texts[f.name] = path.read_text(encoding="utf-8").strip()

    logger.debug(f"Loaded {len(texts)} prompts from {directory}")
    return Prompts(**texts)
