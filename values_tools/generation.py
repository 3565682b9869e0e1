"""
Value and context generation.

generate_value() articulates a value (attention policies) for a user's
message and a context / choice type. generate_contexts() lists hidden
situational factors that would change how a question should be approached.
"""

import logging
from typing import List, Sequence, Union

from .schemas import ContextFactor, ContextFactorsResult, GeneratedValue, generated_value_schema
from .services.llm import StructuredGenerator
from .types import Value

logger = logging.getLogger(__name__)

VALUE_TEMPERATURE = 0.2


async def generate_value(
    question: str,
    context: Union[str, Sequence[str]],
    llm: StructuredGenerator,
    prompt: str,
    include_story: bool = False,
    include_title: bool = False,
) -> GeneratedValue:
    """
    Articulate a value for a user's message in a given context.

    Args:
        question: The user's message
        context: Context(s) or choice type(s) the value is for
        llm: Structured generator
        prompt: Generate-value system prompt
        include_story: Also require a one-sentence fictional story
        include_title: Also require a short title

    Raises:
        GenerationError: generation failed
    """
    schema = generated_value_schema(include_story=include_story, include_title=include_title)
    if not isinstance(context, str):
        context = list(context)

    return await llm.gen_obj(
        prompt=prompt,
        data={"User's message": question, "X": context},
        schema=schema,
        temperature=VALUE_TEMPERATURE,
    )


def generated_value_to_value(generated: GeneratedValue, id: int) -> Value:
    """Turn a generated value into a Value with the given id."""
    return Value(
        id=id,
        policies=list(generated.revised_attention_policies),
        title=generated.title,
    )


async def generate_contexts(
    question: str,
    llm: StructuredGenerator,
    prompt: str,
) -> List[ContextFactor]:
    """
    List implicit factors that would change how to approach a question.

    Raises:
        GenerationError: generation failed
    """
    result = await llm.gen_obj(
        prompt=prompt,
        data={"Question": question},
        schema=ContextFactorsResult,
    )
    logger.debug(f"Generated {len(result.factors)} context factors")
    return result.factors
