"""Prefill a permit application from the client's stored profile."""

from __future__ import annotations

from typing import Any

from pawlegal.calculator.models import PermitApplication, PermitProfile


def prefill_application(
    application: PermitApplication, profile: PermitProfile | None
) -> PermitApplication:
    """Return a copy of ``application`` with unset fields taken from ``profile``.

    Values the user already entered always win. The permit category is only
    copied when the user has not started selecting one, so a partial
    selection is never mixed with the profile's.
    """
    if profile is None:
        return application.model_copy()

    updates: dict[str, Any] = {}
    category = application.permit_category
    if (
        profile.permit_category is not None
        and category.motif is None
        and category.subcategory is None
        and category.precise_type is None
    ):
        updates["permit_category"] = profile.permit_category.model_copy()

    if application.current_delivery_date is None and profile.delivery_date is not None:
        updates["current_delivery_date"] = profile.delivery_date
    if application.current_expiration_date is None and profile.expiration_date is not None:
        updates["current_expiration_date"] = profile.expiration_date

    return application.model_copy(update=updates, deep=True)
