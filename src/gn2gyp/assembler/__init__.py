"""
GYP assembly.

Merges per-toolset fragments into GYP targets and groups them into files.
"""

from gn2gyp.assembler.merger import FIELD_POLICIES, FieldPolicy, GypTargetBuilder
from gn2gyp.assembler.orchestrator import GypProject, GypProjectAssembler, TranslationHooks

__all__ = [
    "FIELD_POLICIES",
    "FieldPolicy",
    "GypProject",
    "GypProjectAssembler",
    "GypTargetBuilder",
    "TranslationHooks",
]
