"""Registration of slash commands for the bot."""

from __future__ import annotations

import discord
from discord.ext import commands

from ..core.models import User
from ..data.store import VisitStore
from ..ui.modals import PlanVisitModal, ProfileModal
from ..ui.views import (
    InTownView,
    VisitPickerView,
    directory_embed,
    profile_embed,
    suggestions_embed,
    toggle_in_town,
    visit_window,
    visits_embed,
)
from .utils import NO_PROFILE


def register_commands(bot: commands.Bot, store: VisitStore) -> None:
    """Register the visit board slash commands on ``bot``."""
    tree = bot.tree

    async def acting_user(interaction: discord.Interaction) -> User | None:
        """Select the caller's profile as the store's current user."""
        user = store.session_for_discord(interaction.user.id)
        if user is None:
            await interaction.response.send_message(NO_PROFILE, ephemeral=True)
        return user

    @tree.command(name="register", description="Create or update your profile")
    async def register(interaction: discord.Interaction) -> None:
        existing = store.user_for_discord(interaction.user.id)
        await interaction.response.send_modal(
            ProfileModal(store, interaction.user.id, existing)
        )

    @tree.command(name="profile", description="Show your profile")
    async def profile(interaction: discord.Interaction) -> None:
        user = await acting_user(interaction)
        if user is None:
            return
        await interaction.response.send_message(embed=profile_embed(user), ephemeral=True)

    @tree.command(name="in_town", description="Toggle whether you are in town right now")
    async def in_town(interaction: discord.Interaction) -> None:
        await toggle_in_town(store, interaction)

    @tree.command(name="plan_visit", description="Plan a future visit")
    async def plan_visit(interaction: discord.Interaction) -> None:
        user = await acting_user(interaction)
        if user is None:
            return
        await interaction.response.send_modal(PlanVisitModal(store, user))

    @tree.command(name="my_visits", description="Show your current and planned visits")
    async def my_visits(interaction: discord.Interaction) -> None:
        user = await acting_user(interaction)
        if user is None:
            return
        await interaction.response.send_message(
            embed=visits_embed(store, user),
            view=InTownView(store),
            ephemeral=True,
        )

    @tree.command(name="suggest", description="Suggest an activity for someone's visit")
    async def suggest(interaction: discord.Interaction) -> None:
        user = await acting_user(interaction)
        if user is None:
            return
        if not store.active_visits():
            await interaction.response.send_message(
                "No one has shared a visit yet.", ephemeral=True
            )
            return
        await interaction.response.send_message(
            "Select a visit to suggest an activity for:",
            view=VisitPickerView(store, user),
            ephemeral=True,
        )

    @tree.command(name="suggestions", description="List activity suggestions for a visit")
    @discord.app_commands.describe(visit_id="Visit ID")
    async def suggestions(interaction: discord.Interaction, visit_id: str) -> None:
        visit = store.get_visit(visit_id)
        if visit is None:
            await interaction.response.send_message("Visit not found.", ephemeral=True)
            return
        await interaction.response.send_message(
            embed=suggestions_embed(store, visit), ephemeral=True
        )

    if hasattr(suggestions, "autocomplete"):
        @suggestions.autocomplete("visit_id")
        async def suggestions_visit_id_autocomplete(
            interaction: discord.Interaction, current: str
        ) -> list[discord.app_commands.Choice[str]]:
            current_lower = current.lower()
            results = []
            for visit in store.active_visits():
                label = f"{store.display_name(visit)}: {visit_window(visit)}"
                if current_lower in label.lower() or current_lower in visit.id:
                    results.append(
                        discord.app_commands.Choice(name=label[:100], value=visit.id)
                    )
            return results[:25]

    @tree.command(name="directory", description="Browse everyone in the directory")
    async def directory(interaction: discord.Interaction) -> None:
        if not store.users:
            await interaction.response.send_message(
                "No one is registered yet.", ephemeral=True
            )
            return
        store.session_for_discord(interaction.user.id)
        await interaction.response.send_message(
            embed=directory_embed(store), ephemeral=True
        )

    @tree.command(name="logout", description="Sign out of the visit board")
    async def logout(interaction: discord.Interaction) -> None:
        user = await acting_user(interaction)
        if user is None:
            return
        store.logout()
        if store.variant == "directory":
            message = "You've been removed from the directory."
        else:
            message = "Signed out. Your profile and visits are kept."
        await interaction.response.send_message(message, ephemeral=True)
