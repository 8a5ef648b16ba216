"""Residence permit taxonomy: motif -> subcategory -> precise type.

Loaded once from YAML and read-only afterwards. The form walks the tree with
:meth:`PermitTaxonomy.children_of` and :meth:`PermitTaxonomy.select`; the
engine only needs the leaf to resolve lead-time constants.
"""

from __future__ import annotations

import logging
from enum import StrEnum
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel

from pawlegal.calculator.models import PermitCategory, PermitInfo

logger = logging.getLogger(__name__)

_DEFAULT_CONFIG_PATH = Path(__file__).resolve().parents[3] / "config" / "permit_taxonomy.yml"

_FALLBACK_LEAD_TIMES: dict[str, int] = {
    "first_application_months": 2,
    "renewal_min_months": 2,
    "renewal_max_months": 4,
}


class TaxonomyLevel(StrEnum):
    MOTIF = "motif"
    SUBCATEGORY = "subcategory"
    PRECISE_TYPE = "precise_type"


_LEVEL_ORDER: list[TaxonomyLevel] = [
    TaxonomyLevel.MOTIF,
    TaxonomyLevel.SUBCATEGORY,
    TaxonomyLevel.PRECISE_TYPE,
]


class TaxonomyOption(BaseModel):
    """A selectable node of the taxonomy."""

    value: str
    label: str


class LeadTimes(BaseModel):
    """Filing lead times for a permit type, in calendar months."""

    first_application_months: int
    renewal_min_months: int
    renewal_max_months: int


class PermitTaxonomy:
    """Static three-level permit classification with lead-time lookup."""

    def __init__(self, config_path: str | Path | None = None) -> None:
        self._config_path = Path(config_path) if config_path else _DEFAULT_CONFIG_PATH
        self._motifs: list[TaxonomyOption] = []
        self._subcategories: dict[str, list[TaxonomyOption]] = {}
        self._types: dict[str, list[TaxonomyOption]] = {}
        self._paths: dict[str, PermitCategory] = {}
        self._lead_times: dict[str, LeadTimes] = {}
        self._info: dict[str, PermitInfo] = {}
        self._load_config()

    def _load_config(self) -> None:
        with open(self._config_path) as fh:
            raw = yaml.safe_load(fh) or {}

        sheets: dict[str, Any] = raw.get("info_sheets") or {}
        defaults = {**_FALLBACK_LEAD_TIMES, **(raw.get("defaults", {}).get("lead_times") or {})}

        for motif_data in raw.get("motifs", []):
            motif = str(motif_data["value"])
            self._motifs.append(TaxonomyOption(value=motif, label=motif_data.get("label", motif)))
            motif_leads = {**defaults, **(motif_data.get("lead_times") or {})}
            subcategories: list[TaxonomyOption] = []

            for sub_data in motif_data.get("subcategories", []):
                sub = str(sub_data["value"])
                if sub in self._types:
                    raise ValueError(f"Duplicate subcategory {sub!r} in {self._config_path}")
                subcategories.append(TaxonomyOption(value=sub, label=sub_data.get("label", sub)))
                sub_leads = {**motif_leads, **(sub_data.get("lead_times") or {})}
                types: list[TaxonomyOption] = []

                for type_data in sub_data.get("types", []):
                    precise = str(type_data["value"])
                    if precise in self._paths:
                        raise ValueError(f"Duplicate permit type {precise!r} in {self._config_path}")
                    types.append(TaxonomyOption(value=precise, label=type_data.get("label", precise)))
                    self._paths[precise] = PermitCategory(
                        motif=motif, subcategory=sub, precise_type=precise
                    )
                    self._lead_times[precise] = self._build_lead_times(
                        precise, {**sub_leads, **(type_data.get("lead_times") or {})}
                    )
                    info = type_data.get("info")
                    if info is not None:
                        self._info[precise] = self._build_info(precise, info, sheets)

                self._types[sub] = types
            self._subcategories[motif] = subcategories

    def _build_info(self, precise_type: str, info: Any, sheets: dict[str, Any]) -> PermitInfo:
        # A type either names a shared sheet or carries its own mapping.
        if isinstance(info, str):
            if info not in sheets:
                raise ValueError(
                    f"Unknown info sheet {info!r} for permit type {precise_type!r} in "
                    f"{self._config_path}. Available: {list(sheets.keys())}"
                )
            info = sheets[info]
        return PermitInfo(**info)

    @staticmethod
    def _build_lead_times(precise_type: str, data: dict[str, Any]) -> LeadTimes:
        leads = LeadTimes(**data)
        if leads.renewal_min_months > leads.renewal_max_months:
            logger.warning(
                "Renewal lead times inverted for %r (min=%d, max=%d); swapping",
                precise_type,
                leads.renewal_min_months,
                leads.renewal_max_months,
            )
            leads = LeadTimes(
                first_application_months=leads.first_application_months,
                renewal_min_months=leads.renewal_max_months,
                renewal_max_months=leads.renewal_min_months,
            )
        return leads

    # -- queries ----------------------------------------------------------

    def children_of(
        self, level: TaxonomyLevel | str, parent_value: str | None = None
    ) -> list[TaxonomyOption]:
        """Options available at ``level`` under ``parent_value``.

        ``parent_value`` is ignored for the motif level, which has no parent.
        """
        level = TaxonomyLevel(level)
        if level is TaxonomyLevel.MOTIF:
            return list(self._motifs)

        table = self._subcategories if level is TaxonomyLevel.SUBCATEGORY else self._types
        if parent_value not in table:
            raise ValueError(
                f"Unknown parent {parent_value!r} for level {level.value!r}. "
                f"Available: {list(table.keys())}"
            )
        return list(table[parent_value])

    def select(
        self,
        current: PermitCategory,
        level: TaxonomyLevel | str,
        value: str | None,
    ) -> PermitCategory:
        """Return a new selection with ``level`` set and every lower level cleared."""
        level = TaxonomyLevel(level)
        index = _LEVEL_ORDER.index(level)
        parent = None if index == 0 else getattr(current, _LEVEL_ORDER[index - 1].value)

        if value is not None:
            allowed = {option.value for option in self.children_of(level, parent)}
            if value not in allowed:
                raise ValueError(
                    f"Unknown {level.value} {value!r} under {parent!r}. "
                    f"Available: {sorted(allowed)}"
                )

        updates: dict[str, str | None] = {level.value: value}
        for lower in _LEVEL_ORDER[index + 1:]:
            updates[lower.value] = None
        return current.model_copy(update=updates)

    def locate(self, precise_type: str) -> PermitCategory | None:
        """Full path of a precise type, or None if unknown."""
        path = self._paths.get(precise_type)
        return path.model_copy() if path else None

    def label_of(self, precise_type: str) -> str:
        sub = self._paths[precise_type].subcategory
        for option in self._types[sub]:
            if option.value == precise_type:
                return option.label
        return precise_type

    def lead_times(self, precise_type: str) -> LeadTimes:
        if precise_type not in self._lead_times:
            raise ValueError(
                f"Unknown permit type {precise_type!r}. "
                f"Available: {list(self._lead_times.keys())}"
            )
        return self._lead_times[precise_type]

    def info_of(self, precise_type: str) -> PermitInfo | None:
        """Information sheet of a precise type, or None when none is configured."""
        if precise_type not in self._paths:
            raise ValueError(
                f"Unknown permit type {precise_type!r}. "
                f"Available: {list(self._paths.keys())}"
            )
        return self._info.get(precise_type)

    def validate(self, category: PermitCategory) -> list[str]:
        """Check that a fully or partly filled selection is consistent with the tree."""
        errors: list[str] = []
        if category.motif is not None and category.motif not in self._subcategories:
            errors.append(f"permit_category.motif: motif inconnu {category.motif!r}.")
            return errors

        if category.subcategory is not None:
            if category.subcategory not in self._types:
                errors.append(
                    f"permit_category.subcategory: sous-catégorie inconnue {category.subcategory!r}."
                )
                return errors
            if category.motif is not None and category.subcategory not in {
                o.value for o in self._subcategories[category.motif]
            }:
                errors.append(
                    "permit_category.subcategory: "
                    f"{category.subcategory!r} n'appartient pas au motif {category.motif!r}."
                )

        if category.precise_type is not None:
            path = self._paths.get(category.precise_type)
            if path is None:
                errors.append(
                    f"permit_category.precise_type: type de titre inconnu {category.precise_type!r}."
                )
            elif category.subcategory is not None and path.subcategory != category.subcategory:
                errors.append(
                    "permit_category.precise_type: "
                    f"{category.precise_type!r} n'appartient pas à la sous-catégorie "
                    f"{category.subcategory!r}."
                )
            elif category.motif is not None and path.motif != category.motif:
                errors.append(
                    "permit_category.precise_type: "
                    f"{category.precise_type!r} n'appartient pas au motif {category.motif!r}."
                )
        return errors
