from __future__ import annotations
import re
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple

from ..logging import log
from ..schema import DatasetSchema, NamingRule
from ..store import Store, as_map, count_collections

_VERSION_RE = re.compile(r"^\d+\.\d+\.\d+")
# fromisoformat before 3.11 only takes 3 or 6 fractional digits
_FRACTION_RE = re.compile(r"(\d{2}:\d{2}:\d{2})\.(\d+)")


@dataclass
class ValidationReport:
    """Findings of one consistency run; valid iff there are no errors."""
    dataset: str
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    summary: Dict[str, int] = field(default_factory=dict)

    @property
    def valid(self) -> bool:
        return len(self.errors) == 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "dataset": self.dataset,
            "ok": self.valid,
            "errors": list(self.errors),
            "warnings": list(self.warnings),
            "error_count": len(self.errors),
            "warning_count": len(self.warnings),
            "summary": dict(self.summary),
        }


RuleGroup = Callable[[DatasetSchema, Mapping[str, Any], ValidationReport], None]


class ConsistencyValidator:
    """Checklist validator for a generated dataset document."""

    def __init__(self, schema: DatasetSchema):
        self.schema = schema

    def validate(self, document: Mapping[str, Any]) -> ValidationReport:
        report = ValidationReport(dataset=self.schema.name)
        for title, group in RULE_GROUPS:
            log().debug(f"Validating {title}...")
            group(self.schema, document, report)
        report.summary = count_collections(self.schema, document)
        return report

    def validate_store(self, store: Store) -> ValidationReport:
        return self.validate(store.document)


# ============================================================================
# Rule groups
# ============================================================================

def _validate_structure(schema: DatasetSchema, doc: Mapping[str, Any], report: ValidationReport) -> None:
    """Every declared top-level section is present and is a mapping"""
    for section in schema.sections.declared():
        if section not in doc or doc[section] is None:
            report.errors.append(f"Missing required section: {section}")
        elif not isinstance(doc[section], dict):
            report.errors.append(f"{section} should be an object")

def _validate_categories(schema: DatasetSchema, doc: Mapping[str, Any], report: ValidationReport) -> None:
    """Category names match their keys and carry their member maps"""
    for key, category in as_map(doc.get(schema.sections.categories)).items():
        if not isinstance(category, dict):
            report.errors.append(f"Category {key} should be an object")
            continue

        name = category.get("name")
        if not name:
            report.errors.append(f"Category {key} missing name")
        elif name != key:
            report.errors.append(f"Category name mismatch: {key} vs {name}")

        for fld in schema.category.required:
            if category.get(fld) is None:
                report.errors.append(f"Category {key} missing {fld}")

def _validate_entries(schema: DatasetSchema, doc: Mapping[str, Any], report: ValidationReport) -> None:
    """Per-entry required fields, naming, descriptions, children and category links"""
    label = schema.label("entry")
    categories = as_map(doc.get(schema.sections.categories))
    rules = schema.entry

    child_fields: List[Tuple[str, str]] = [(rules.children, schema.label("child"))]
    if rules.static_children:
        child_fields.append((rules.static_children, schema.label("static_child")))
    if rules.properties:
        child_fields.append((rules.properties, schema.label("property")))

    for key, record in as_map(doc.get(schema.sections.entries)).items():
        if not isinstance(record, dict):
            report.errors.append(f"{label} {key} should be an object")
            continue

        _check_record(report, label, key, record, rules.required, rules.naming, rules.min_description)

        for fld, child_label in child_fields:
            for child_key, child in as_map(record.get(fld)).items():
                _check_child(report, label, key, child_label, child_key, child, schema.child_required)
                if isinstance(child, dict) and rules.static_flag and fld in schema.child_maps():
                    _check_static_flag(report, schema, key, child_label, child_key, child,
                                       is_static_map=(fld == rules.static_children))

        _check_category_link(report, label, key, record, categories)

def _validate_keywords(schema: DatasetSchema, doc: Mapping[str, Any], report: ValidationReport) -> None:
    """Keywords: like entries, with inverted naming and no static flag"""
    if not schema.keyword or not schema.sections.keywords:
        return
    label = schema.label("keyword")
    child_label = schema.label("keyword_child")
    categories = as_map(doc.get(schema.sections.categories))
    rules = schema.keyword

    for key, record in as_map(doc.get(schema.sections.keywords)).items():
        if not isinstance(record, dict):
            report.errors.append(f"{label} {key} should be an object")
            continue

        _check_record(report, label, key, record, rules.required, rules.naming, rules.min_description)

        for child_key, child in as_map(record.get(rules.children)).items():
            _check_child(report, label, key, child_label, child_key, child, schema.keyword_child_required)

        _check_category_link(report, label, key, record, categories)

def _validate_metadata(schema: DatasetSchema, doc: Mapping[str, Any], report: ValidationReport) -> None:
    """Stored totals equal the live counts; version and timestamp are well formed"""
    metadata = doc.get(schema.sections.metadata)
    if not isinstance(metadata, dict):
        return

    totals = dict(schema.totals)
    for fld in list(schema.metadata_required) + list(totals):
        if fld not in metadata:
            report.errors.append(f"Metadata missing {fld}")

    counts = count_collections(schema, doc)
    for fld, counter in schema.totals:
        if fld not in metadata:
            continue
        claimed = metadata[fld]
        actual = counts[counter]
        if isinstance(claimed, bool) or claimed != actual:
            report.errors.append(f"Metadata {fld} mismatch: claimed {claimed}, actual {actual}")

    if "version" in metadata:
        version = metadata["version"]
        if not isinstance(version, str) or not _VERSION_RE.match(version):
            report.warnings.append(f"Version should follow semantic versioning: {version}")

    if "lastUpdated" in metadata and not _parses_datetime(metadata["lastUpdated"]):
        report.errors.append(f"Invalid lastUpdated date format: {metadata['lastUpdated']}")

def _validate_cross_references(schema: DatasetSchema, doc: Mapping[str, Any], report: ValidationReport) -> None:
    """Category members exist, child names are unique per entry, entries are not empty"""
    label = schema.label("entry")
    entries = as_map(doc.get(schema.sections.entries))
    entry_names = {schema.normalize(k) for k in entries}
    keyword_names = set()
    _check_name_collisions(report, schema, label, entries)
    if schema.sections.keywords:
        keywords = as_map(doc.get(schema.sections.keywords))
        keyword_names = {schema.normalize(k) for k in keywords}
        _check_name_collisions(report, schema, schema.label("keyword"), keywords)

    for cat_key, category in as_map(doc.get(schema.sections.categories)).items():
        if not isinstance(category, dict):
            continue
        for member in as_map(category.get(schema.category.entries)):
            if schema.normalize(member) not in entry_names:
                report.errors.append(f"Category {cat_key} references non-existent {label.lower()}: {member}")
        if schema.category.keywords and schema.sections.keywords:
            for member in as_map(category.get(schema.category.keywords)):
                if schema.normalize(member) not in keyword_names:
                    report.errors.append(
                        f"Category {cat_key} references non-existent {schema.label('keyword').lower()}: {member}"
                    )

    empty_fields = schema.child_maps() + ([schema.entry.properties] if schema.entry.properties else [])
    for key, record in entries.items():
        if not isinstance(record, dict):
            continue

        seen: Dict[str, int] = {}
        for fld in schema.child_maps():
            for child_key in as_map(record.get(fld)):
                norm = schema.normalize(child_key)
                seen[norm] = seen.get(norm, 0) + 1
        duplicates = sorted(name for name, n in seen.items() if n > 1)
        if duplicates:
            report.errors.append(f"{label} {key} has duplicate {schema.label('child')}s: {', '.join(duplicates)}")

        if all(len(as_map(record.get(fld))) == 0 for fld in empty_fields):
            report.warnings.append(f"{label} {key} has no {' or '.join(empty_fields)}")


RULE_GROUPS: List[Tuple[str, RuleGroup]] = [
    ("data structure", _validate_structure),
    ("categories", _validate_categories),
    ("entries", _validate_entries),
    ("keywords", _validate_keywords),
    ("metadata", _validate_metadata),
    ("data consistency", _validate_cross_references),
]

# ============================================================================
# Helpers
# ============================================================================

def _check_record(report: ValidationReport, label: str, key: str, record: Dict[str, Any],
                  required: Tuple[str, ...], naming: Optional[NamingRule], min_description: int) -> None:
    for fld in required:
        if fld not in record:
            report.errors.append(f"{label} {key} missing {fld}")

    if "name" in record and record["name"] != key:
        report.errors.append(f"{label} name mismatch: {key} vs {record['name']}")

    if naming and not naming.accepts(key):
        report.warnings.append(f"{label} {key} {naming.message}")

    description = record.get("description")
    if not isinstance(description, str) or len(description) < min_description:
        report.warnings.append(f"{label} {key} has short or missing description")

def _check_child(report: ValidationReport, label: str, key: str, child_label: str,
                 child_key: str, child: Any, required: Tuple[str, ...]) -> None:
    if not isinstance(child, dict):
        report.errors.append(f"{label} {key} {child_label} {child_key} should be an object")
        return
    for fld in required:
        if child.get(fld) is None:
            report.errors.append(f"{label} {key} {child_label} {child_key} missing {fld}")
    if "name" in child and child["name"] != child_key:
        report.errors.append(f"{child_label.capitalize()} name mismatch in {key}: {child_key} vs {child['name']}")

def _check_static_flag(report: ValidationReport, schema: DatasetSchema, key: str, child_label: str,
                       child_key: str, child: Dict[str, Any], is_static_map: bool) -> None:
    flag = schema.entry.static_flag
    marked = child.get(flag) is True
    if is_static_map and not marked:
        report.warnings.append(f"{child_label.capitalize()} {key}.{child_key} should have {flag}: true")
    elif not is_static_map and marked:
        report.warnings.append(
            f"{child_label.capitalize()} {key}.{child_key} is marked {flag}: true "
            f"but is not listed under {schema.entry.static_children}"
        )

def _check_category_link(report: ValidationReport, label: str, key: str,
                         record: Dict[str, Any], categories: Dict[str, Any]) -> None:
    category = record.get("category")
    if category is None or category == "":
        return
    if not isinstance(category, str) or category not in categories:
        report.errors.append(f"{label} {key} references non-existent category: {category}")

def _check_name_collisions(report: ValidationReport, schema: DatasetSchema, label: str,
                           records: Dict[str, Any]) -> None:
    """Keys that normalize to the same name are one identity stored twice"""
    groups: Dict[str, List[str]] = {}
    for key in records:
        groups.setdefault(schema.normalize(key), []).append(key)
    for keys in groups.values():
        if len(keys) > 1:
            report.errors.append(f"Duplicate {label.lower()} name: {', '.join(keys)}")

def _parses_datetime(value: Any) -> bool:
    if not isinstance(value, str) or not value.strip():
        return False
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    text = _FRACTION_RE.sub(lambda m: f"{m.group(1)}.{m.group(2)[:6].ljust(6, '0')}", text)
    try:
        datetime.fromisoformat(text)
    except ValueError:
        return False
    return True
