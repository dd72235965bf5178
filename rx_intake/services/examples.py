# rx_intake/services/examples.py
import random
from pathlib import Path
from typing import List, Optional

import yaml

from rx_intake.codec.decoder import load_example
from rx_intake.commons.config import CONFIG_DIR
from rx_intake.commons.types import CanonicalExampleRecord

EXAMPLES_PATH = CONFIG_DIR / "examples.yaml"


def load_examples(path: Optional[Path] = None) -> List[CanonicalExampleRecord]:
    with open(path or EXAMPLES_PATH, "r", encoding="utf-8") as f:
        raw = yaml.safe_load(f) or {}
    return [load_example(item) for item in raw.get("examples", [])]


def get_example(
    index: Optional[int] = None,
    rng: Optional[random.Random] = None,
    examples: Optional[List[CanonicalExampleRecord]] = None,
) -> CanonicalExampleRecord:
    """Pick an example by position, or at random when ``index`` is None."""
    pool = examples if examples is not None else load_examples()
    if not pool:
        raise LookupError("Example library is empty")
    if index is None:
        return (rng or random).choice(pool)
    if not 0 <= index < len(pool):
        raise LookupError(
            f"Example index {index} out of range, library has {len(pool)} examples"
        )
    return pool[index]
