"""Shared StructureDefinition fixtures for the fhir_structure_tree tests."""

import copy
import re
from typing import Any, Dict

import pytest

FHIR_TYPE_EXTENSION = (
    "http://hl7.org/fhir/StructureDefinition/structuredefinition-fhir-type"
)

DOM_2_CONSTRAINT = {
    "key": "dom-2",
    "severity": "error",
    "human": (
        "If the resource is contained in another resource, "
        "it SHALL NOT contain nested Resources"
    ),
    "expression": "contained.contained.empty()",
    "xpath": "not(parent::f:contained and f:contained)",
    "source": "http://hl7.org/fhir/StructureDefinition/DomainResource",
}


def element(
    element_id: str,
    path: str = None,
    base_path: str = None,
    min_: int = 0,
    max_: str = "1",
    types=None,
    **extra: Any,
) -> Dict[str, Any]:
    """Build one snapshot element definition."""
    path = path or re.sub(r":[^.]+", "", element_id)
    result: Dict[str, Any] = {
        "id": element_id,
        "path": path,
        "min": min_,
        "max": max_,
        "base": {"path": base_path or path},
    }
    if types is not None:
        result["type"] = [{"code": code} for code in types]
    result.update(extra)
    return result


HEART_RATE_PROFILE: Dict[str, Any] = {
    "resourceType": "StructureDefinition",
    "id": "heartrate",
    "url": "http://hl7.org/fhir/StructureDefinition/heartrate",
    "name": "observation-heartrate",
    "type": "Observation",
    "description": "FHIR Heart Rate Profile",
    "kind": "resource",
    "baseDefinition": "http://hl7.org/fhir/StructureDefinition/vitalsigns",
    "derivation": "constraint",
    "publisher": "Health Level Seven International (Orders and Observations)",
    "snapshot": {
        "element": [
            element(
                "Observation",
                min_=0,
                max_="*",
                constraint=[DOM_2_CONSTRAINT],
            ),
            {
                "id": "Observation.id",
                "path": "Observation.id",
                "min": 0,
                "max": "1",
                "base": {"path": "Resource.id"},
                "type": [
                    {
                        "extension": [
                            {"url": FHIR_TYPE_EXTENSION, "valueUrl": "string"}
                        ],
                        "code": "http://hl7.org/fhirpath/System.String",
                    }
                ],
            },
            element("Observation.meta", base_path="Resource.meta", types=["Meta"]),
            element(
                "Observation.extension",
                base_path="DomainResource.extension",
                max_="*",
                types=["Extension"],
            ),
            element("Observation.identifier", max_="*", types=["Identifier"]),
            element("Observation.category", min_=1, max_="*", types=["CodeableConcept"]),
            element(
                "Observation.category:VSCat",
                min_=1,
                types=["CodeableConcept"],
                sliceName="VSCat",
            ),
            element("Observation.category:VSCat.id", base_path="Element.id", types=["string"]),
            element(
                "Observation.category:VSCat.coding",
                base_path="CodeableConcept.coding",
                max_="*",
                types=["Coding"],
            ),
            element(
                "Observation.category:VSCat.coding.system",
                base_path="Coding.system",
                types=["uri"],
            ),
            element("Observation.code", min_=1, types=["CodeableConcept"]),
            element(
                "Observation.code.coding",
                base_path="CodeableConcept.coding",
                max_="*",
                types=["Coding"],
            ),
            element("Observation.code.coding.code", base_path="Coding.code", types=["code"]),
            element("Observation.subject", types=["Reference"]),
            element("Observation.value[x]", types=["Quantity"]),
            element(
                "Observation.value[x]:valueQuantity",
                types=["Quantity"],
                sliceName="valueQuantity",
            ),
            element(
                "Observation.value[x]:valueQuantity.value",
                base_path="Quantity.value",
                min_=1,
                types=["decimal"],
            ),
            element("Observation.component", max_="*", types=["BackboneElement"]),
            element(
                "Observation.component.extension",
                base_path="Element.extension",
                max_="*",
                types=["Extension"],
            ),
            element("Observation.component.code", min_=1, types=["CodeableConcept"]),
        ]
    },
}

HEART_RATE_PATHS = [
    "extension",
    "identifier",
    "category",
    "category",
    "category.coding",
    "category.coding.system",
    "code",
    "code.coding",
    "code.coding.code",
    "subject",
    "value[x]",
    "valueQuantity",
    "valueQuantity.value",
    "component",
    "component.extension",
    "component.code",
]

EXTENSION_PROFILE: Dict[str, Any] = {
    "resourceType": "StructureDefinition",
    "id": "patient-birthPlace",
    "url": "http://hl7.org/fhir/StructureDefinition/patient-birthPlace",
    "name": "birthPlace",
    "type": "Extension",
    "description": "The registered place of birth of the patient.",
    "kind": "complex-type",
    "baseDefinition": "http://hl7.org/fhir/StructureDefinition/Extension",
    "derivation": "constraint",
    "publisher": "Health Level Seven International (Patient Administration)",
    "context": [{"type": "element", "expression": "Patient"}],
    "snapshot": {
        "element": [
            element("Extension", max_="1"),
            element("Extension.url", base_path="Extension.url", min_=1, types=["uri"]),
            element(
                "Extension.value[x]",
                base_path="Extension.value[x]",
                min_=1,
                types=["Address"],
            ),
        ]
    },
}

PRIMITIVE_PROFILE: Dict[str, Any] = {
    "resourceType": "StructureDefinition",
    "id": "mock",
    "kind": "primitive-type",
    "derivation": "constraint",
    "snapshot": {"element": [{}]},
}


@pytest.fixture
def heart_rate_profile() -> Dict[str, Any]:
    return copy.deepcopy(HEART_RATE_PROFILE)


@pytest.fixture
def extension_profile() -> Dict[str, Any]:
    return copy.deepcopy(EXTENSION_PROFILE)


@pytest.fixture
def primitive_profile() -> Dict[str, Any]:
    return copy.deepcopy(PRIMITIVE_PROFILE)


@pytest.fixture
def heart_rate_paths():
    return list(HEART_RATE_PATHS)
