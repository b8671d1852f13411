"""
Generation pipeline and command line entry point.
"""
from __future__ import annotations

import ast
import json

import pytest

from layergen.config import GeneratorSettings
from layergen.pipeline import GenerationPipeline, ModelDefinition
from layergen.pipeline.__main__ import main, resolve_inputs

EXPECTED_MODULES = {
    "fakes.mapper.access_mapper",
    "fakes.mapper.transport_mapper",
    "fakes.mapper.content.content_transport_mapper",
    "fakes.dao.dao_object_factory",
    "fakes.dto.dto_object_factory",
    "fakes.domain.domain_object_factory",
    "fakes.dto.content.dto_object_factory",
    "fakes.domain.content.domain_object_factory",
}


def test_generate_sample(sample_definition):
    result = GenerationPipeline().generate(sample_definition)

    assert result.valid
    assert result.messages == []
    assert result.entities_processed == 3
    assert result.versions_processed == 2
    assert {module.qualified_name for module in result.modules} == EXPECTED_MODULES
    for module in result.modules:
        ast.parse(module.render())


def test_generate_single_mapper_type(sample_definition):
    pipeline = GenerationPipeline(settings=GeneratorSettings(mapper_types=("ACCESS",)))

    names = {module.qualified_name for module in pipeline.generate(sample_definition).modules}

    assert "fakes.mapper.access_mapper" in names
    assert not any("transport" in name for name in names)


def test_unknown_mapper_type():
    with pytest.raises(RuntimeError):
        GenerationPipeline(settings=GeneratorSettings(mapper_types=("VIEW",)))


def test_invalid_model_generates_nothing(sample_model, caplog):
    sample_model["entities"][1]["references"][0]["targetEntity"] = "Missing"
    sample_model["entities"][0]["versions"][0]["removedFieldNames"] = ["unknown"]

    with caplog.at_level("WARNING"):
        result = GenerationPipeline().generate(ModelDefinition.model_validate(sample_model))

    assert not result.valid
    assert result.modules == []
    assert len(result.messages) == 2
    assert "[pipeline]" in caplog.text


def test_write_creates_packages(tmp_path, sample_definition):
    pipeline = GenerationPipeline()
    result = pipeline.generate(sample_definition)

    written = pipeline.write(result, tmp_path)

    assert (tmp_path / "fakes" / "mapper" / "content" / "content_transport_mapper.py").is_file()
    assert (tmp_path / "fakes" / "__init__.py").is_file()
    assert (tmp_path / "fakes" / "mapper" / "content" / "__init__.py").is_file()
    assert len([path for path in written if path.name != "__init__.py"]) == len(EXPECTED_MODULES)


def test_stale_files(tmp_path, sample_definition):
    pipeline = GenerationPipeline()
    result = pipeline.generate(sample_definition)
    assert len(pipeline.stale_files(result, tmp_path)) == len(EXPECTED_MODULES)

    pipeline.write(result, tmp_path)
    assert pipeline.stale_files(result, tmp_path) == []

    target = tmp_path / "fakes" / "mapper" / "access_mapper.py"
    target.write_text("# edited\n", encoding="utf-8")
    assert pipeline.stale_files(result, tmp_path) == [target]


def _write_model(directory, model):
    path = directory / "model.json"
    path.write_text(json.dumps(model), encoding="utf-8")
    return path


def test_resolve_inputs(tmp_path, sample_model):
    path = _write_model(tmp_path, sample_model)

    assert resolve_inputs([tmp_path, path]) == [path]
    with pytest.raises(FileNotFoundError):
        resolve_inputs([tmp_path / "missing.json"])


def test_resolve_inputs_without_definitions(tmp_path):
    with pytest.raises(RuntimeError):
        resolve_inputs([tmp_path])


def test_main_writes_and_checks(tmp_path, sample_model, monkeypatch):
    monkeypatch.delenv("LAYERGEN_MAPPER_TYPES", raising=False)
    monkeypatch.delenv("LAYERGEN_LOG_LEVEL", raising=False)
    model_path = _write_model(tmp_path, sample_model)
    output_dir = tmp_path / "out"

    assert main([str(model_path), "--output-dir", str(output_dir), "--check-only"]) == 1
    assert not output_dir.exists()

    assert main([str(model_path), "--output-dir", str(output_dir), "--log-level", "debug"]) == 0
    assert (output_dir / "fakes" / "dto" / "dto_object_factory.py").is_file()

    assert main([str(model_path), "--output-dir", str(output_dir), "--check-only"]) == 0


def test_main_reports_invalid_model(tmp_path, sample_model, capsys):
    sample_model["entities"][0]["versions"][1]["baseVersionId"] = "v9"
    model_path = _write_model(tmp_path, sample_model)

    assert main([str(model_path), "--output-dir", str(tmp_path / "out")]) == 1
    assert "v9" in capsys.readouterr().err
