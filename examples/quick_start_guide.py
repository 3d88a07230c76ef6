#!/usr/bin/env python3
"""
Quick Start Guide for FHIR Structure Tree.

This example walks through structurizing a small StructureDefinition,
navigating its attribute trees and materializing array items.
"""

import json

from fhir_structure_tree import StructureTreeConfig, rebuild_definition, structurize


BLOOD_PRESSURE = {
    "resourceType": "StructureDefinition",
    "id": "bp-example",
    "url": "http://example.org/fhir/StructureDefinition/bp-example",
    "name": "BloodPressureExample",
    "type": "Observation",
    "description": "Blood pressure with systolic and diastolic components",
    "kind": "resource",
    "baseDefinition": "http://hl7.org/fhir/StructureDefinition/Observation",
    "derivation": "constraint",
    "publisher": "Example Publisher",
    "snapshot": {
        "element": [
            {"id": "Observation", "path": "Observation", "min": 0, "max": "*",
             "constraint": []},
            {"id": "Observation.id", "path": "Observation.id", "min": 0, "max": "1",
             "base": {"path": "Resource.id"}, "type": [{"code": "id"}]},
            {"id": "Observation.code", "path": "Observation.code", "min": 1, "max": "1",
             "base": {"path": "Observation.code"},
             "type": [{"code": "CodeableConcept"}]},
            {"id": "Observation.effective[x]", "path": "Observation.effective[x]",
             "min": 0, "max": "1", "base": {"path": "Observation.effective[x]"},
             "type": [{"code": "dateTime"}, {"code": "Period"}]},
            {"id": "Observation.component", "path": "Observation.component",
             "min": 2, "max": "*", "base": {"path": "Observation.component"},
             "type": [{"code": "BackboneElement"}]},
            {"id": "Observation.component.code", "path": "Observation.component.code",
             "min": 1, "max": "1", "base": {"path": "Observation.component.code"},
             "type": [{"code": "CodeableConcept"}]},
            {"id": "Observation.component.value[x]",
             "path": "Observation.component.value[x]", "min": 0, "max": "1",
             "base": {"path": "Observation.component.value[x]"},
             "type": [{"code": "Quantity"}]},
        ]
    },
}


def quick_start_example():
    """Quick start example showing basic usage."""

    print("🚀 QUICK START - FHIR Structure Tree")
    print("=" * 45)

    # Step 1: Structurize
    print("\n📄 Step 1: Structurizing the snapshot")
    print("-" * 30)

    definition = structurize(BLOOD_PRESSURE)
    print(f"✅ {definition.meta.name}: {len(definition.attributes)} top-level attributes")
    print(f"📏 {definition.attribute_count} attributes, "
          f"{definition.metrics.elements_omitted} inherited elements omitted")

    # Step 2: Navigate
    print("\n🔍 Step 2: Navigating paths")
    print("-" * 30)

    for node in definition.iter_attributes():
        print(f"  {node.path:<30} {node.cardinality:<6} {'|'.join(node.types)}")

    # Step 3: Type choices
    print("\n🔀 Step 3: Spreading a choice element")
    print("-" * 30)

    effective = definition.get_attribute("effective[x]")
    for choice in effective.spread_types():
        print(f"  {choice.path} ({choice.types[0]})")

    # Step 4: Array items
    print("\n📚 Step 4: Materializing components")
    print("-" * 30)

    component = definition.get_attribute("component")
    systolic = component.add_item()
    diastolic = component.add_item()
    print(f"  {systolic.path}: {[child.path for child in systolic.children]}")
    print(f"  {diastolic.path}: {[child.path for child in diastolic.children]}")

    # Step 5: Serialize and rebuild
    print("\n💾 Step 5: Serializing")
    print("-" * 30)

    serialized = json.dumps(definition.to_dict())
    restored = rebuild_definition(serialized)
    print(f"  {len(serialized)} bytes of JSON, {restored.attribute_count} attributes restored")

    # Step 6: Keep inherited elements
    print("\n⚙️  Step 6: Keeping inherited elements")
    print("-" * 30)

    full = structurize(BLOOD_PRESSURE, StructureTreeConfig.keep_inherited())
    print(f"  Top-level paths: {[root.path for root in full.attributes]}")

    print("\n🎉 Done!")


if __name__ == "__main__":
    quick_start_example()
