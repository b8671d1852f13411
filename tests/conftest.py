import copy
import sys
import types

import pytest

from layergen.pipeline import ModelBuilder, ModelDefinition

SAMPLE_MODEL = {
    "basePackage": "fakes",
    "entities": [
        {
            "baseName": "Root",
            "description": "Root of the sample",
            "fields": [
                {"fieldName": "description", "type": "str"},
                {"fieldName": "internalKey", "type": "int", "models": "DAO_DOMAIN"},
            ],
            "references": [
                {"referenceName": "sub", "targetEntity": "Sub", "isOwner": True},
                {"referenceName": "others", "targetEntity": "Other", "isOwner": True, "isList": True},
            ],
            "versions": [
                {"versionId": "v1", "removedFieldNames": ["description"]},
                {
                    "versionId": "v2",
                    "baseVersionId": "v1",
                    "addedFields": [{"fieldName": "summary", "type": "str"}],
                },
            ],
        },
        {
            "baseName": "Sub",
            "fields": [{"fieldName": "name", "type": "str"}],
            "references": [{"referenceName": "root", "targetEntity": "Root"}],
        },
    ],
    "groupings": [
        {
            "groupingPackage": "content",
            "entities": [
                {
                    "baseName": "Other",
                    "models": "DTO_DOMAIN",
                    "fields": [{"fieldName": "value", "type": "int"}],
                }
            ],
        }
    ],
}


@pytest.fixture()
def sample_model():
    return copy.deepcopy(SAMPLE_MODEL)


@pytest.fixture()
def sample_definition(sample_model):
    return ModelDefinition.model_validate(sample_model)


@pytest.fixture()
def sample_graph(sample_definition):
    return ModelBuilder().build(sample_definition)


@pytest.fixture()
def load_generated(monkeypatch):
    """
    Execute a generated module against empty stand-in layer classes.

    Every imported layer class is replaced by a plain class registered in
    `sys.modules`; returns the module namespace and the stand-in classes.
    """

    def load(module):
        created = {}
        classes = {}
        for qualified_name in sorted(module.imports):
            module_name, _, class_name = qualified_name.rpartition(".")
            if module_name.startswith(("layergen", "typing")):
                continue
            fake = created.get(module_name)
            if fake is None:
                fake = types.ModuleType(module_name)
                monkeypatch.setitem(sys.modules, module_name, fake)
                created[module_name] = fake
            layer_class = type(class_name, (), {"identification": None})
            setattr(fake, class_name, layer_class)
            classes[class_name] = layer_class

        namespace = {}
        exec(compile(module.render(), f"<{module.qualified_name}>", "exec"), namespace)
        return namespace, classes

    return load
