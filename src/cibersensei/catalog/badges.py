"""Badge seed data. Awarding happens elsewhere; this only keeps the catalog in place."""

from __future__ import annotations

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from cibersensei.db.models import Badge

logger = logging.getLogger(__name__)

BADGE_SEED_DATA: list[dict] = [
    # Progress
    {
        "id": "primer_paso",
        "name": "Primer Paso",
        "description": "Responde correctamente tu primera misión",
        "icon": "🛡️",
        "sort_order": 1,
    },
    {
        "id": "ascension_basico",
        "name": "Guardián Básico",
        "description": "Supera la prueba de ascensión del nivel básico",
        "icon": "🥉",
        "sort_order": 2,
    },
    {
        "id": "ascension_intermedio",
        "name": "Guardián Intermedio",
        "description": "Supera la prueba de ascensión del nivel intermedio",
        "icon": "🥈",
        "sort_order": 3,
    },
    {
        "id": "ascension_dificil",
        "name": "Guardián Avanzado",
        "description": "Supera la prueba de ascensión del nivel difícil",
        "icon": "🥇",
        "sort_order": 4,
    },
    {
        "id": "ascension_experto",
        "name": "Analista Experto",
        "description": "Supera la prueba de ascensión del nivel experto",
        "icon": "🔐",
        "sort_order": 5,
    },
    {
        "id": "ciber_sensei",
        "name": "CiberSensei",
        "description": "Completa la prueba final del nivel master",
        "icon": "🥋",
        "sort_order": 6,
    },
    # Habits
    {
        "id": "racha_7",
        "name": "Constancia",
        "description": "Juega siete días seguidos",
        "icon": "🔥",
        "sort_order": 7,
    },
    # Social
    {
        "id": "primer_amigo",
        "name": "Equipo Azul",
        "description": "Acepta tu primera solicitud de amistad",
        "icon": "🤝",
        "sort_order": 8,
    },
]


async def seed_badges(db: AsyncSession) -> int:
    """Insert or refresh every badge definition. Returns number of badges seeded."""
    seeded = 0
    for badge_data in BADGE_SEED_DATA:
        badge = await db.get(Badge, badge_data["id"])
        if badge is None:
            db.add(Badge(**badge_data))
        else:
            for field, value in badge_data.items():
                setattr(badge, field, value)
        seeded += 1

    await db.commit()
    logger.info("Seeded %d badge definitions", seeded)
    return seeded
