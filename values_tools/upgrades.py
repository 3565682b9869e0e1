"""
Upgrade generation - plausible "wisdom upgrade" transitions between values.

An upgrade a_id -> b_id claims that someone holding value A would, after
some experience, come to hold value B and see it as what they cared about
all along.
"""

import logging
from typing import List, Optional, Sequence

from .errors import TargetMismatchError
from .schemas import UpgradeTransition, UpgradesResult
from .services.llm import StructuredGenerator
from .types import Upgrade, UpgradeMapping, Value

logger = logging.getLogger(__name__)

UPGRADE_TEMPERATURE = 0.3


def _to_upgrade(transition: UpgradeTransition) -> Upgrade:
    return Upgrade(
        a_id=transition.a_id,
        b_id=transition.b_id,
        a_was_really_about=transition.a_was_really_about,
        clarification=transition.clarification,
        story=transition.story,
        likelihood_score=transition.likelihood_score,
        mapping=[UpgradeMapping(a=m.a, rationale=m.rationale) for m in transition.mapping],
    )


async def generate_upgrades(
    values: Sequence[Value],
    llm: StructuredGenerator,
    prompt: str,
    context: Optional[str] = None,
) -> List[Upgrade]:
    """
    Generate upgrade transitions among a set of values.

    Returns [] without calling the model when fewer than two values are given.

    Raises:
        GenerationError: generation failed
    """
    if len(values) < 2:
        logger.info("Not enough values to generate upgrades")
        return []

    data = {"values": [v.to_prompt_dict() for v in values]}
    if context:
        data["context"] = context

    result = await llm.gen_obj(
        prompt=prompt,
        data=data,
        schema=UpgradesResult,
        temperature=UPGRADE_TEMPERATURE,
    )
    return [_to_upgrade(t) for t in result.transitions]


async def generate_upgrades_to_value(
    target: Value,
    candidates: Sequence[Value],
    llm: StructuredGenerator,
    prompt: str,
    context: Optional[str] = None,
) -> List[Upgrade]:
    """
    Generate upgrade transitions from candidate values to a fixed target.

    Raises:
        GenerationError: generation failed
        TargetMismatchError: a generated transition does not end at the target
    """
    data = {
        "targetValue": target.to_prompt_dict(),
        "candidateValues": [v.to_prompt_dict() for v in candidates],
    }
    if context:
        data["context"] = context

    result = await llm.gen_obj(
        prompt=prompt,
        data=data,
        schema=UpgradesResult,
        temperature=UPGRADE_TEMPERATURE,
    )

    mismatched = [t.b_id for t in result.transitions if t.b_id != target.id]
    if mismatched:
        raise TargetMismatchError(
            f"Invalid upgrade generated: target value is {target.id}, got {mismatched}"
        )

    return [_to_upgrade(t) for t in result.transitions]
