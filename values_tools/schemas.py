"""
Response schemas for structured generation.

Each model is sent to the language model as a JSON schema and used to
validate the reply. Field descriptions are part of the instructions.
"""

from typing import List, Literal, Optional, Type

from pydantic import BaseModel, Field, create_model


# =============================================================================
# DEDUPLICATION
# =============================================================================

class ValueCluster(BaseModel):
    value_ids: List[int] = Field(
        description="Ids of values that all are about the same source of meaning."
    )
    explanation: str = Field(
        default="",
        description="One sentence on why these values share a source of meaning.",
    )


class DeduplicateValuesResult(BaseModel):
    clusters: List[ValueCluster] = Field(
        description=(
            "A list of value clusters, where each cluster lists the ids of values "
            "that all are about the same source of meaning."
        )
    )


class SynonymGroupsResult(BaseModel):
    synonym_groups: List[List[str]] = Field(
        description=(
            "A list of synonym groups, where each term in the group is a synonym of "
            "every other term. Combined, the terms in all the groups should contain "
            "all terms that were provided."
        )
    )


class ExistingDuplicateValueResult(BaseModel):
    duplicate_id: Optional[int] = Field(
        description="Id of the canonical value that represents the same source of meaning, or null."
    )


class ExistingDuplicateContextResult(BaseModel):
    duplicate_index: Optional[int] = Field(
        description="Index of the candidate that names the same kind of choice, or null."
    )


class BestValueResult(BaseModel):
    best_value_id: int = Field(
        description="Id of the values card that is best formulated according to the guidelines."
    )


# =============================================================================
# UPGRADES
# =============================================================================

class UpgradeMappingOut(BaseModel):
    a: str = Field(description="An evaluation criterion of the old value.")
    rationale: str = Field(description="What strategy did you use, and why is it relevant?")


class UpgradeTransition(BaseModel):
    a_id: int = Field(description="The id of the value the person used to have.")
    b_id: int = Field(description="The id of the value they have now.")
    a_was_really_about: str = Field(
        description=(
            "If the new value is a 'deeper cut' at what you *really* cared about the "
            "whole time, what was it that you really cared about all along?"
        )
    )
    clarification: str = Field(
        description="What was confused or incomplete about the old value, that the new value clarifies?"
    )
    story: str = Field(
        description=(
            "A plausible, personal, first-person story of a situation that revealed a "
            "problem with the older value and led to the new one, and where the new "
            "value is broadly applicable."
        )
    )
    mapping: List[UpgradeMappingOut] = Field(
        default_factory=list,
        description=(
            "How do each of the evaluation criteria from the old value relate to "
            "criteria of the new one?"
        ),
    )
    likelihood_score: Literal["A", "B", "C", "D", "F"] = Field(
        description="How likely is this transition and story to be considered a gain in wisdom?"
    )


class UpgradesResult(BaseModel):
    transitions: List[UpgradeTransition] = Field(default_factory=list)


# =============================================================================
# VALUE / CONTEXT GENERATION
# =============================================================================

class GeneratedValue(BaseModel):
    refusal: str = Field(default="", description='First, if you like, say "I will not assist..."')
    speculations: str = Field(
        description=(
            "Speculate about what's happening underneath the user's message. What's the "
            "true situation, which the user may not have spelled out?"
        )
    )
    attention_policies: str = Field(
        description=(
            "Starting from 'I recognize a good <X> by...', list 12 attentional policies "
            "that might help choose a good X, marking prescriptive (⬇A) or "
            "instrumental (⬇I) ones."
        )
    )
    more_attention_policies: Optional[str] = Field(
        default=None,
        description=(
            "Leave blank if at least 3 policies are neither prescriptive nor "
            "instrumental. Otherwise, write more policies."
        ),
    )
    revised_attention_policies: List[str] = Field(
        description=(
            "Final set of 3-7 attention policies that are neither prescriptive nor "
            "instrumental, most meaningful to a relevant person, and that work "
            "together as one source of meaning."
        )
    )
    fictional_story: Optional[str] = None
    title: Optional[str] = None


FICTIONAL_STORY_DESCRIPTION = (
    "A very short one-sentence, first-person, present continuous story about the "
    "exact moment that felt meaningful to someone with this value. No names or "
    "other PII."
)
TITLE_DESCRIPTION = (
    "A short, catchy title that summarizes the core essence of the value described "
    "in the policies."
)


def generated_value_schema(include_story: bool = False, include_title: bool = False) -> Type[GeneratedValue]:
    """GeneratedValue with fictional_story / title made required when requested."""
    if not include_story and not include_title:
        return GeneratedValue

    fields = {}
    if include_story:
        fields["fictional_story"] = (str, Field(description=FICTIONAL_STORY_DESCRIPTION))
    if include_title:
        fields["title"] = (str, Field(description=TITLE_DESCRIPTION))
    name = "GeneratedValueWith" + "".join(
        part for part, on in (("Story", include_story), ("Title", include_title)) if on
    )
    return create_model(name, __base__=GeneratedValue, **fields)


class ContextFactor(BaseModel):
    situational_context: str = Field(
        description=(
            "1-2 sentences describing an imaginary aspect of the situation, not "
            "explicit in the question, that would change the values one should "
            "approach the question with."
        )
    )
    factor: str = Field(description="The factor, in as few words as possible.")
    question_with_factor: str = Field(
        description="The original question, modified so the factor is explicit."
    )


class ContextFactorsResult(BaseModel):
    factors: List[ContextFactor] = Field(
        description="5-10 factors that are not explicit, relevant to answering the question."
    )
