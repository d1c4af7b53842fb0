"""Hardcoded habit templates and goal catalogs: configuration only."""

from __future__ import annotations

from dataclasses import dataclass

ICONS: tuple[str, ...] = (
    "🎯", "💧", "🏃", "📚", "🧘", "💰", "🥦", "💻", "🎨", "🎵", "🛌", "💊", "🧹", "🧠",
)

COLORS: tuple[str, ...] = (
    "bg-emerald-500",
    "bg-blue-500",
    "bg-purple-500",
    "bg-rose-500",
    "bg-amber-500",
    "bg-cyan-500",
    "bg-pink-500",
    "bg-indigo-500",
    "bg-orange-500",
    "bg-teal-500",
)

COUNTRIES: dict[str, str] = {
    "US": "United States",
    "GB": "United Kingdom",
    "CA": "Canada",
    "IN": "India",
    "JP": "Japan",
    "DE": "Germany",
    "FR": "France",
    "BR": "Brazil",
    "AU": "Australia",
    "NP": "Nepal",
    "Global": "Earth",
}


@dataclass(frozen=True, slots=True)
class HabitTemplate:
    title: str
    icon: str
    color: str


TEMPLATES: tuple[HabitTemplate, ...] = (
    HabitTemplate(title="Drink 2L Water", icon="💧", color="bg-blue-500"),
    HabitTemplate(title="Read 15 Mins", icon="📚", color="bg-purple-500"),
    HabitTemplate(title="Morning Jog", icon="🏃", color="bg-emerald-500"),
    HabitTemplate(title="Meditate", icon="🧘", color="bg-indigo-500"),
    HabitTemplate(title="Save Money", icon="💰", color="bg-amber-500"),
    HabitTemplate(title="Code", icon="💻", color="bg-slate-700"),
    HabitTemplate(title="No Sugar", icon="🥦", color="bg-rose-500"),
    HabitTemplate(title="Sleep 8h", icon="🛌", color="bg-cyan-500"),
)


def list_templates() -> list[HabitTemplate]:
    return list(TEMPLATES)
