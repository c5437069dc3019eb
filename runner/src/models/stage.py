"""
Stage definition models.
"""

from pydantic import BaseModel, Field, field_validator
from types import MappingProxyType
from typing import Mapping, Optional, Tuple, Union
from enum import Enum
import shlex

class StageKind(str, Enum):
    CHECKOUT = "checkout"
    COMMAND = "command"

class CheckoutStage(BaseModel):
    """Populate the workspace from version control.

    Without a repository the stage only checks that the workspace exists.
    """
    name: str
    kind: StageKind = StageKind.CHECKOUT
    repository: Optional[str] = None
    ref: Optional[str] = None

    class Config:
        frozen = True

    def describe(self) -> str:
        if not self.repository:
            return "(use existing workspace)"
        if self.ref:
            return f"git checkout {self.repository}@{self.ref}"
        return f"git checkout {self.repository}"

class CommandStage(BaseModel):
    name: str
    kind: StageKind = StageKind.COMMAND
    command: str
    arguments: Tuple[str, ...] = ()
    env: Mapping[str, str] = Field(default_factory=dict, validate_default=True)

    class Config:
        frozen = True

    @field_validator("env")
    @classmethod
    def freeze_env(cls, value):
        return MappingProxyType(dict(value))

    @property
    def argv(self) -> Tuple[str, ...]:
        return (self.command,) + self.arguments

    def describe(self) -> str:
        return shlex.join(self.argv)

Stage = Union[CheckoutStage, CommandStage]

class PipelineDefinition(BaseModel):
    name: str = "Unnamed Pipeline"
    env: Mapping[str, str] = Field(default_factory=dict, validate_default=True)
    stages: Tuple[Stage, ...]

    class Config:
        frozen = True

    @field_validator("env")
    @classmethod
    def freeze_env(cls, value):
        return MappingProxyType(dict(value))

    @property
    def stage_names(self) -> Tuple[str, ...]:
        return tuple(stage.name for stage in self.stages)
