"""Tests for pipeline parser."""

import pytest
from runner.src.exceptions import PipelineConfigError
from runner.src.models.stage import CheckoutStage, CommandStage
from runner.src.services.pipeline_parser import (
    find_pipeline_file,
    load_pipeline_file,
    parse_pipeline_config,
    parse_pipeline_dict,
)

def test_valid_pipeline():
    config = """
name: service
stages:
  - name: Checkout
    checkout:
      repository: https://example.com/org/service.git
      ref: main
  - name: Build
    command: mvn
    args:
      - clean
      - install
  - name: Docker Build
    run: docker build -t service:latest .
"""
    result = parse_pipeline_config(config)
    assert result.name == "service"
    assert result.stage_names == ("Checkout", "Build", "Docker Build")

    checkout, build, docker = result.stages
    assert isinstance(checkout, CheckoutStage)
    assert checkout.repository == "https://example.com/org/service.git"
    assert checkout.ref == "main"

    assert isinstance(build, CommandStage)
    assert build.command == "mvn"
    assert build.arguments == ("clean", "install")

    assert docker.command == "/bin/sh"
    assert docker.arguments == ("-c", "docker build -t service:latest .")

def test_command_string_is_split():
    config = """
stages:
  - name: Build
    command: mvn clean install -Dmessage="hello world"
"""
    stage = parse_pipeline_config(config).stages[0]
    assert stage.command == "mvn"
    assert stage.arguments == ("clean", "install", "-Dmessage=hello world")

def test_command_list():
    config = {
        "stages": [
            {"name": "Build", "command": ["docker", "build", "-t", "app:1", "."]}
        ]
    }
    stage = parse_pipeline_dict(config).stages[0]
    assert stage.argv == ("docker", "build", "-t", "app:1", ".")

def test_default_name():
    result = parse_pipeline_dict({"stages": [{"name": "A", "run": "true"}]})
    assert result.name == "Unnamed Pipeline"

def test_missing_stages():
    config = """
name: Bad Pipeline
"""
    with pytest.raises(PipelineConfigError, match="must have 'stages'"):
        parse_pipeline_config(config)

def test_empty_stages():
    with pytest.raises(PipelineConfigError, match="at least one stage"):
        parse_pipeline_dict({"stages": []})

def test_missing_stage_name():
    config = """
stages:
  - command: mvn clean install
"""
    with pytest.raises(PipelineConfigError, match="missing 'name'"):
        parse_pipeline_config(config)

def test_missing_stage_action():
    config = """
stages:
  - name: Build
"""
    with pytest.raises(PipelineConfigError, match="needs one of"):
        parse_pipeline_config(config)

def test_conflicting_stage_actions():
    with pytest.raises(PipelineConfigError, match="defines both"):
        parse_pipeline_dict({"stages": [{"name": "Build", "command": "mvn", "run": "mvn"}]})

def test_duplicate_stage_names():
    config = {
        "stages": [
            {"name": "Build", "run": "true"},
            {"name": "Build", "run": "true"},
        ]
    }
    with pytest.raises(PipelineConfigError, match="not unique"):
        parse_pipeline_dict(config)

def test_checkout_must_be_first():
    config = {
        "stages": [
            {"name": "Build", "run": "true"},
            {"name": "Checkout", "checkout": None},
        ]
    }
    with pytest.raises(PipelineConfigError, match="must be the first stage"):
        parse_pipeline_dict(config)

def test_checkout_without_repository():
    config = """
stages:
  - name: Checkout
    checkout:
  - name: Build
    run: make
"""
    checkout = parse_pipeline_config(config).stages[0]
    assert isinstance(checkout, CheckoutStage)
    assert checkout.repository is None

def test_checkout_ref_requires_repository():
    with pytest.raises(PipelineConfigError, match="requires a 'repository'"):
        parse_pipeline_dict({"stages": [{"name": "Checkout", "checkout": {"ref": "main"}}]})

def test_non_string_argument():
    config = {"stages": [{"name": "Build", "command": "mvn", "args": ["-T", 4]}]}
    with pytest.raises(PipelineConfigError, match="argument 1 must be a string"):
        parse_pipeline_dict(config)

def test_unbalanced_quotes():
    with pytest.raises(PipelineConfigError, match="cannot be parsed"):
        parse_pipeline_dict({"stages": [{"name": "Build", "command": "echo 'oops"}]})

def test_env_is_merged_into_stages():
    config = """
env:
  JAVA_HOME: /opt/jdk
  RETRIES: 3
stages:
  - name: Build
    command: mvn install
    env:
      MAVEN_OPTS: -Xmx1g
      RETRIES: 5
"""
    result = parse_pipeline_config(config)
    assert result.env == {"JAVA_HOME": "/opt/jdk", "RETRIES": "3"}
    assert result.stages[0].env == {
        "JAVA_HOME": "/opt/jdk",
        "RETRIES": "5",
        "MAVEN_OPTS": "-Xmx1g",
    }

def test_invalid_yaml():
    with pytest.raises(PipelineConfigError, match="Invalid YAML"):
        parse_pipeline_config("stages: [unclosed")

def test_empty_config():
    with pytest.raises(PipelineConfigError, match="Empty"):
        parse_pipeline_config("")

def test_stages_are_immutable():
    stage = parse_pipeline_dict({"stages": [{"name": "Build", "command": "mvn install"}]}).stages[0]
    with pytest.raises(Exception):
        stage.command = "rm"

def test_find_pipeline_file(tmp_path):
    assert find_pipeline_file(tmp_path) is None

    (tmp_path / "pipeline.yml").write_text("stages: []\n")
    assert find_pipeline_file(tmp_path) == tmp_path / "pipeline.yml"

    (tmp_path / ".pipeline.yml").write_text("stages: []\n")
    assert find_pipeline_file(tmp_path) == tmp_path / ".pipeline.yml"

def test_load_missing_file(tmp_path):
    with pytest.raises(PipelineConfigError, match="Cannot read pipeline file"):
        load_pipeline_file(tmp_path / "missing.yml")

def test_stage_env_is_read_only():
    definition = parse_pipeline_dict({
        "env": {"JAVA_HOME": "/opt/jdk"},
        "stages": [{"name": "Build", "command": "mvn install", "env": {"MAVEN_OPTS": "-Xmx1g"}}],
    })
    with pytest.raises(TypeError):
        definition.stages[0].env["MAVEN_OPTS"] = "-Xmx4g"
    with pytest.raises(TypeError):
        definition.env["JAVA_HOME"] = "/usr/lib/jvm"
    assert definition.stages[0].env["MAVEN_OPTS"] == "-Xmx1g"
