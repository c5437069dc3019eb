"""
Pipeline YAML parser and validator.
"""

import os
import shlex
import yaml
from pathlib import Path
from typing import List, Dict, Any, Optional, Union

from runner.src.exceptions import PipelineConfigError
from runner.src.models.stage import (
    CheckoutStage,
    CommandStage,
    PipelineDefinition,
    Stage,
)

PIPELINE_FILENAMES = [
    ".pipeline.yml",
    ".pipeline.yaml",
    "pipeline.yml",
    "pipeline.yaml",
]

SHELL = "/bin/sh"

STAGE_ACTIONS = ("checkout", "command", "run")

def parse_pipeline_config(yaml_content: str) -> PipelineDefinition:
    """Parse pipeline YAML configuration from string."""
    try:
        config = yaml.safe_load(yaml_content)
    except yaml.YAMLError as e:
        raise PipelineConfigError(f"Invalid YAML: {e}")

    return validate_config(config)

def parse_pipeline_dict(config: Dict[str, Any]) -> PipelineDefinition:
    """Validate pipeline configuration from dict."""
    return validate_config(config)

def load_pipeline_file(path: Union[str, Path]) -> PipelineDefinition:
    """Read and validate a pipeline definition file."""
    try:
        with open(path, "r") as f:
            content = f.read()
    except OSError as e:
        raise PipelineConfigError(f"Cannot read pipeline file {path}: {e}")

    return parse_pipeline_config(content)

def find_pipeline_file(workspace: Union[str, Path]) -> Optional[Path]:
    """
    Look for a pipeline definition in the workspace.
    Returns the first match or None if not found.
    """
    for filename in PIPELINE_FILENAMES:
        config_path = os.path.join(workspace, filename)
        if os.path.isfile(config_path):
            return Path(config_path)

    return None

def validate_config(config: Optional[Dict[str, Any]]) -> PipelineDefinition:
    """Validate pipeline configuration structure."""
    if not config:
        raise PipelineConfigError("Empty pipeline configuration")

    if not isinstance(config, dict):
        raise PipelineConfigError("Pipeline configuration must be a dictionary")

    name = config.get("name", "Unnamed Pipeline")
    if not isinstance(name, str):
        raise PipelineConfigError("Pipeline 'name' must be a string")

    env = validate_env(config.get("env"), "Pipeline")

    if "stages" not in config:
        raise PipelineConfigError("Pipeline must have 'stages' defined")

    stages = config["stages"]
    if not isinstance(stages, list):
        raise PipelineConfigError("Pipeline 'stages' must be a list")

    if len(stages) == 0:
        raise PipelineConfigError("Pipeline must have at least one stage")

    validated_stages: List[Stage] = []
    seen_names = set()
    for i, stage in enumerate(stages):
        validated_stage = validate_stage(stage, i, env)
        if validated_stage.name in seen_names:
            raise PipelineConfigError(f"Stage {i} name '{validated_stage.name}' is not unique")
        seen_names.add(validated_stage.name)
        validated_stages.append(validated_stage)

    return PipelineDefinition(name=name, env=env, stages=tuple(validated_stages))

def validate_env(env: Any, owner: str) -> Dict[str, str]:
    """Validate an env mapping, stringifying scalar values."""
    if env is None:
        return {}

    if not isinstance(env, dict):
        raise PipelineConfigError(f"{owner} 'env' must be a dictionary")

    validated = {}
    for key, value in env.items():
        if not isinstance(key, str):
            raise PipelineConfigError(f"{owner} env keys must be strings")
        if isinstance(value, (dict, list)) or value is None:
            raise PipelineConfigError(f"{owner} env '{key}' must be a scalar value")
        validated[key] = str(value)
    return validated

def validate_stage(stage: Dict[str, Any], index: int, pipeline_env: Optional[Dict[str, str]] = None) -> Stage:
    """Validate a single pipeline stage."""
    if not isinstance(stage, dict):
        raise PipelineConfigError(f"Stage {index} must be a dictionary")

    if "name" not in stage:
        raise PipelineConfigError(f"Stage {index} missing 'name'")

    if not isinstance(stage["name"], str) or not stage["name"].strip():
        raise PipelineConfigError(f"Stage {index} 'name' must be a non-empty string")

    actions = [key for key in STAGE_ACTIONS if key in stage]
    if not actions:
        raise PipelineConfigError(f"Stage {index} needs one of 'checkout', 'command' or 'run'")
    if len(actions) > 1:
        raise PipelineConfigError(f"Stage {index} defines both '{actions[0]}' and '{actions[1]}'")

    if actions[0] == "checkout":
        # Later stages depend on the populated workspace
        if index != 0:
            raise PipelineConfigError(f"Stage {index} 'checkout' must be the first stage")
        return validate_checkout(stage, index)

    env = dict(pipeline_env or {})
    env.update(validate_env(stage.get("env"), f"Stage {index}"))

    if actions[0] == "run":
        script = stage["run"]
        if not isinstance(script, str) or not script.strip():
            raise PipelineConfigError(f"Stage {index} 'run' must be a non-empty string")
        if "args" in stage:
            raise PipelineConfigError(f"Stage {index} 'args' cannot be combined with 'run'")
        return CommandStage(
            name=stage["name"],
            command=SHELL,
            arguments=("-c", script),
            env=env,
        )

    command, arguments = validate_command(stage, index)
    return CommandStage(
        name=stage["name"],
        command=command,
        arguments=tuple(arguments),
        env=env,
    )

def validate_checkout(stage: Dict[str, Any], index: int) -> CheckoutStage:
    checkout = stage["checkout"]
    if checkout is None or checkout is True:
        checkout = {}

    if not isinstance(checkout, dict):
        raise PipelineConfigError(f"Stage {index} 'checkout' must be a dictionary")

    for key in ("repository", "ref"):
        if key in checkout and not isinstance(checkout[key], str):
            raise PipelineConfigError(f"Stage {index} checkout '{key}' must be a string")

    if checkout.get("ref") and not checkout.get("repository"):
        raise PipelineConfigError(f"Stage {index} checkout 'ref' requires a 'repository'")

    return CheckoutStage(
        name=stage["name"],
        repository=checkout.get("repository") or None,
        ref=checkout.get("ref") or None,
    )

def validate_command(stage: Dict[str, Any], index: int):
    """
    Split a stage's command into executable and arguments.

    A string without 'args' is split with shell quoting rules; with 'args'
    it names the executable only. A list holds the whole argv.
    """
    command = stage["command"]
    args = stage.get("args")

    if args is not None:
        if not isinstance(args, list):
            raise PipelineConfigError(f"Stage {index} 'args' must be a list")
        for j, arg in enumerate(args):
            if not isinstance(arg, str):
                raise PipelineConfigError(f"Stage {index} argument {j} must be a string")

    if isinstance(command, list):
        if args is not None:
            raise PipelineConfigError(f"Stage {index} 'args' cannot be combined with a command list")
        argv = command
    elif isinstance(command, str):
        if args is not None:
            argv = [command] + args
        else:
            try:
                argv = shlex.split(command)
            except ValueError as e:
                raise PipelineConfigError(f"Stage {index} 'command' cannot be parsed: {e}")
    else:
        raise PipelineConfigError(f"Stage {index} 'command' must be a string or a list")

    for j, part in enumerate(argv):
        if not isinstance(part, str):
            raise PipelineConfigError(f"Stage {index} command part {j} must be a string")

    if not argv or not argv[0].strip():
        raise PipelineConfigError(f"Stage {index} 'command' is empty")

    return argv[0], argv[1:]
