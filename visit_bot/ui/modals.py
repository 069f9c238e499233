from __future__ import annotations

import discord
from pydantic import ValidationError

from ..core.models import User, parse_day
from ..data.store import VisitStore


def _split_organizations(text: str) -> list[str]:
    return [o.strip() for o in text.split(",") if o.strip()]


class ProfileModal(discord.ui.Modal, title="Create Account"):
    """Collects profile fields; prefilled when ``existing`` is given."""

    def __init__(self, store: VisitStore, discord_id: int, existing: User | None = None) -> None:
        super().__init__(title="Update Profile" if existing else "Create Account")
        self.store = store
        self.discord_id = discord_id
        self.existing = existing
        self.name_input = discord.ui.TextInput(
            label="Your Name",
            placeholder="Enter your name",
            default=existing.name if existing else None,
            required=True,
            max_length=100,
        )
        self.bio_input = discord.ui.TextInput(
            label="Bio (optional)",
            style=discord.TextStyle.long,
            placeholder="Tell your friends about yourself",
            default=existing.bio if existing else None,
            required=False,
            max_length=1000,
        )
        self.orgs_input = discord.ui.TextInput(
            label="Organizations (comma separated)",
            placeholder="Work, school, club...",
            default=", ".join(existing.organizations) if existing else None,
            required=False,
            max_length=500,
        )
        city_required = store.variant == "directory"
        self.city_input = discord.ui.TextInput(
            label="City" if city_required else "City (optional)",
            default=existing.city if existing else None,
            required=city_required,
            max_length=100,
        )
        self.occupation_input = discord.ui.TextInput(
            label="Occupation (optional)",
            placeholder="What do you do?",
            default=existing.occupation if existing else None,
            required=False,
            max_length=100,
        )
        for item in (
            self.name_input,
            self.bio_input,
            self.orgs_input,
            self.city_input,
            self.occupation_input,
        ):
            self.add_item(item)

    async def on_submit(self, interaction: discord.Interaction) -> None:
        name = (self.name_input.value or "").strip()
        if not name:
            await interaction.response.send_message("Please enter your name.", ephemeral=True)
            return
        city = (self.city_input.value or "").strip()
        if self.store.variant == "directory" and not city:
            await interaction.response.send_message(
                "Please enter both your name and city.", ephemeral=True
            )
            return

        # re-read: another submit may have created the profile since this opened
        existing = self.store.user_for_discord(self.discord_id)
        fields = {
            "name": name,
            "organizations": _split_organizations(self.orgs_input.value or ""),
            "bio": self.bio_input.value,
            "city": city,
            "occupation": self.occupation_input.value,
            "discord_id": self.discord_id,
        }
        try:
            if existing:
                user = User(**{**existing.model_dump(), **fields})
            else:
                user = User(**fields)
        except ValidationError:
            await interaction.response.send_message("Failed to save profile.", ephemeral=True)
            return

        self.store.session_for_discord(self.discord_id)
        self.store.register(user)
        verb = "updated" if existing else "created"
        await interaction.response.send_message(
            f"Welcome, {user.name}! Your profile was {verb}.", ephemeral=True
        )


class PlanVisitModal(discord.ui.Modal, title="Plan a Visit"):
    def __init__(self, store: VisitStore, user: User) -> None:
        super().__init__()
        self.store = store
        self.user = user
        self.start_input = discord.ui.TextInput(
            label="Start Date (YYYY-MM-DD)", placeholder="2025-06-01", required=True, max_length=10
        )
        self.end_input = discord.ui.TextInput(
            label="End Date (YYYY-MM-DD)", placeholder="optional", required=False, max_length=10
        )
        self.notes_input = discord.ui.TextInput(
            label="Notes",
            style=discord.TextStyle.long,
            placeholder="Any details about your visit...",
            required=False,
            max_length=1000,
        )
        self.add_item(self.start_input)
        self.add_item(self.end_input)
        self.add_item(self.notes_input)

    async def on_submit(self, interaction: discord.Interaction) -> None:
        try:
            start = parse_day(self.start_input.value)
            end = parse_day(self.end_input.value)
        except ValueError:
            await interaction.response.send_message(
                "Dates must look like YYYY-MM-DD.", ephemeral=True
            )
            return
        if start is None:
            await interaction.response.send_message("A start date is required.", ephemeral=True)
            return

        visit = self.store.plan_visit(self.user, start, end, self.notes_input.value)
        window = start.date().isoformat()
        if visit.end_date:
            window += f" - {visit.end_date.date().isoformat()}"
        await interaction.response.send_message(f"Visit planned for {window}.", ephemeral=True)


class SuggestionModal(discord.ui.Modal, title="Suggest Activity"):
    def __init__(self, store: VisitStore, user: User, visit_id: str) -> None:
        super().__init__()
        self.store = store
        self.user = user
        self.visit_id = visit_id
        self.title_input = discord.ui.TextInput(
            label="Activity title", required=True, max_length=100
        )
        self.description_input = discord.ui.TextInput(
            label="Description and details",
            style=discord.TextStyle.long,
            required=True,
            max_length=1000,
        )
        self.date_input = discord.ui.TextInput(
            label="Suggested Date (YYYY-MM-DD)", placeholder="optional", required=False, max_length=10
        )
        self.add_item(self.title_input)
        self.add_item(self.description_input)
        self.add_item(self.date_input)

    async def on_submit(self, interaction: discord.Interaction) -> None:
        title = (self.title_input.value or "").strip()
        description = (self.description_input.value or "").strip()
        if not title or not description:
            await interaction.response.send_message(
                "Both a title and a description are required.", ephemeral=True
            )
            return
        try:
            suggested = parse_day(self.date_input.value)
        except ValueError:
            await interaction.response.send_message(
                "Dates must look like YYYY-MM-DD.", ephemeral=True
            )
            return

        try:
            suggestion = self.store.add_suggestion(
                {
                    "user_id": self.user.id,
                    "user_name": self.user.name,
                    "visit_id": self.visit_id,
                    "title": title,
                    "description": description,
                    "suggested_date": suggested,
                }
            )
        except ValidationError:
            await interaction.response.send_message("Failed to add suggestion.", ephemeral=True)
            return
        await interaction.response.send_message(
            f"Suggestion `{suggestion.title}` added.", ephemeral=True
        )
