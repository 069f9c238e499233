from __future__ import annotations

import datetime
import logging

import discord

from ..commands.utils import NO_PROFILE, announce_in_town
from ..core.models import ActivitySuggestion, User, Visit, VisitStatus
from ..data.store import VisitStore
from .modals import SuggestionModal

log = logging.getLogger("visit_bot.views")


def initials(name: str) -> str:
    return "".join(part[0] for part in name.split() if part).upper()[:2]


def format_day(value: datetime.datetime | None) -> str:
    return value.date().isoformat() if value else ""


def visit_window(visit: Visit) -> str:
    if visit.status == VisitStatus.CURRENT:
        return "Currently in town"
    window = format_day(visit.start_date)
    if visit.end_date:
        window += f" - {format_day(visit.end_date)}"
    return window


def profile_embed(user: User) -> discord.Embed:
    embed = discord.Embed(title=user.name, description=user.bio or "")
    embed.add_field(
        name="Organizations",
        value=", ".join(user.organizations) or "(none)",
        inline=False,
    )
    if user.city:
        embed.add_field(name="City", value=user.city, inline=True)
    if user.occupation:
        embed.add_field(name="Occupation", value=user.occupation, inline=True)
    embed.set_footer(text=f"Joined {format_day(user.joined_at)}")
    return embed


def visits_embed(store: VisitStore, user: User) -> discord.Embed:
    current = store.current_visit_for_user(user.id)
    embed = discord.Embed(
        title="Your Visits",
        description="Currently in town!" if current else "Not in town right now.",
    )
    for visit in store.planned_visits_for_user(user.id):
        embed.add_field(
            name=visit_window(visit),
            value=visit.notes or "(no notes)",
            inline=False,
        )
    return embed


def _suggestion_line(store: VisitStore, suggestion: ActivitySuggestion) -> str:
    lines = [suggestion.description]
    if suggestion.suggested_date:
        lines.append(f"Suggested for: {format_day(suggestion.suggested_date)}")
    lines.append(f"Suggested by {store.display_name(suggestion)}")
    return "\n".join(lines)


def suggestions_embed(store: VisitStore, visit: Visit) -> discord.Embed:
    embed = discord.Embed(
        title=f"{store.display_name(visit)}'s visit",
        description=visit_window(visit),
    )
    suggestions = store.suggestions_for_visit(visit.id)
    if not suggestions:
        embed.add_field(name="Activities", value="No activity suggestions yet", inline=False)
    for suggestion in suggestions[:25]:
        embed.add_field(
            name=suggestion.title,
            value=_suggestion_line(store, suggestion),
            inline=False,
        )
    return embed


def directory_embed(store: VisitStore) -> discord.Embed:
    groups = store.directory()
    count = len(store.users)
    embed = discord.Embed(
        title=f"Directory ({count} {'person' if count == 1 else 'people'})"
    )
    current_id = store.current_user.id if store.current_user else None
    for key, members in list(groups.items())[:25]:
        names = [
            f"[{initials(m.name)}] {m.name}" + (" (You)" if m.id == current_id else "")
            for m in members
        ]
        embed.add_field(
            name=f"{key} ({len(members)})",
            value="\n".join(names)[:1024],
            inline=False,
        )
    return embed


async def toggle_in_town(store: VisitStore, interaction: discord.Interaction) -> Visit | None:
    """Flip the caller's in-town state and announce new visits on the board."""
    user = store.session_for_discord(interaction.user.id)
    if user is None:
        await interaction.response.send_message(NO_PROFILE, ephemeral=True)
        return None
    visit = store.mark_in_town(user)
    if visit.status != VisitStatus.CURRENT:
        await interaction.response.send_message("Marked as left town.", ephemeral=True)
        return visit

    await interaction.response.send_message("You're marked as in town!", ephemeral=True)
    if interaction.guild is None:
        return visit
    try:
        await announce_in_town(interaction.guild, user.name)
    except discord.HTTPException:
        log.exception("Failed to announce visit %s", visit.id)
    return visit


class InTownView(discord.ui.View):
    """Single toggle button mirroring the caller's in-town state."""

    def __init__(self, store: VisitStore) -> None:
        super().__init__(timeout=300)
        self.store = store

    @discord.ui.button(label="Toggle in town", style=discord.ButtonStyle.primary)
    async def toggle(self, interaction: discord.Interaction, button: discord.ui.Button) -> None:
        await toggle_in_town(self.store, interaction)


class VisitPickerView(discord.ui.View):
    """Select an active visit, then open a :class:`SuggestionModal` for it."""

    def __init__(self, store: VisitStore, user: User) -> None:
        super().__init__(timeout=120)
        self.store = store
        self.user = user
        options = [
            discord.SelectOption(
                label=f"{store.display_name(v)}: {visit_window(v)}"[:100],
                value=v.id,
            )
            for v in store.active_visits()[:25]
        ]
        self.select = discord.ui.Select(placeholder="Choose a visit", options=options)
        self.select.callback = self.on_select
        self.add_item(self.select)

    async def on_select(self, interaction: discord.Interaction) -> None:
        visit_id = self.select.values[0]
        if self.store.get_visit(visit_id) is None:
            await interaction.response.send_message("Visit not found.", ephemeral=True)
            return
        await interaction.response.send_modal(SuggestionModal(self.store, self.user, visit_id))
