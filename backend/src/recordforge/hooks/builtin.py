"""Framework-provided hooks.

Doctors whose specialization is anything other than "general" are mirrored
into the DoctorSpecialty entity, keyed by doctor id.
"""

import logging

from recordforge.hooks.registry import HookRegistry
from recordforge.hooks.types import HookContext, HookResult

logger = logging.getLogger(__name__)

SPECIALTY_ENTITY = "DoctorSpecialty"
GENERAL = "general"


def sync_doctor_specialty(ctx: HookContext) -> HookResult | None:
    """Keep the doctor's DoctorSpecialty row in step with its specialization."""
    schema = ctx.schemas.get(SPECIALTY_ENTITY)
    if schema is None:
        return HookResult(warning=f"{SPECIALTY_ENTITY} entity is not configured")

    doctor_id = ctx.record.get("doctorid")
    specialization = (ctx.record.get("specialization") or "").strip()
    is_general = specialization.lower() in ("", GENERAL)
    existing = ctx.repository.get(schema, doctor_id)

    if existing is None:
        if not is_general:
            ctx.repository.create(
                schema,
                {"doctorid": doctor_id, "specialty": specialization, "experience": 0},
            )
            logger.info("Added %s as specialist in %s", doctor_id, specialization)
    elif is_general:
        ctx.repository.delete(schema, doctor_id)
        logger.info("Removed %s from specialists", doctor_id)
    elif existing.get("specialty") != specialization:
        ctx.repository.update(schema, doctor_id, {"specialty": specialization})
    return None


def remove_doctor_specialty(ctx: HookContext) -> HookResult | None:
    """Delete the doctor's DoctorSpecialty row so the doctor can be deleted."""
    schema = ctx.schemas.get(SPECIALTY_ENTITY)
    if schema is None:
        return None

    doctor_id = ctx.record.get("doctorid")
    if ctx.repository.get(schema, doctor_id) is not None:
        ctx.repository.delete(schema, doctor_id)
    return None


def register_builtin_hooks() -> None:
    """Register framework-provided hooks. Called at application startup."""
    HookRegistry.register("syncDoctorSpecialty", sync_doctor_specialty)
    HookRegistry.register("removeDoctorSpecialty", remove_doctor_specialty)
