"""Repository for story definitions stored as JSON."""
from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, List

from storygraph.data.errors import DataReferenceError, DataValidationError
from storygraph.data.repositories.base import RepositoryBase
from storygraph.domain.defs import (
    AchievementDef,
    AtmosphereDef,
    ChoiceDef,
    ConditionsDef,
    ConsequencesDef,
    ContentConditionDef,
    ContentVariableDef,
    EndingDef,
    SceneDef,
    StoryConfigDef,
    StoryDef,
    StoryMetadataDef,
    StoryStatsDef,
    StoryVariableDef,
    VariableRange,
)


class StoryRepository(RepositoryBase[StoryDef]):
    """Loads stories and validates their structure."""

    def __init__(self, base_path: Path | str | None = None) -> None:
        super().__init__("stories", base_path)

    def _build(self, raw: dict[str, dict[str, object]]) -> Dict[str, StoryDef]:
        stories: Dict[str, StoryDef] = {}
        for file_id, payload in raw.items():
            story = self.parse_story(payload, f"story '{file_id}'")
            if story.id != file_id:
                raise DataReferenceError(
                    f"story '{file_id}' declares id '{story.id}'; file name and id must match."
                )
            stories[story.id] = story
        return stories

    def parse_story(self, payload: dict[str, object], context: str) -> StoryDef:
        """Parse a camelCase story payload into a StoryDef."""
        story_id = self._require_str(payload.get("id"), f"{context} id")
        config_data = self._require_mapping(payload.get("config"), f"{context} config")
        scenes_data = self._require_mapping(payload.get("scenes", {}), f"{context} scenes")
        metadata = self._parse_metadata(payload.get("metadata"), f"{context} metadata")
        scene_order = payload.get("sceneOrder")
        if scene_order is not None:
            scene_order = self._require_str_list(scene_order, f"{context} sceneOrder")
        return StoryDef(
            id=story_id,
            title=self._require_str(payload.get("title"), f"{context} title"),
            author=self._require_str(payload.get("author", ""), f"{context} author"),
            description=self._require_str(payload.get("description", ""), f"{context} description"),
            cover_image=self._require_str(payload.get("coverImage", ""), f"{context} coverImage"),
            category=self._require_str(payload.get("category", ""), f"{context} category"),
            tags=self._require_str_list(payload.get("tags", []), f"{context} tags"),
            stats=self._parse_stats(payload.get("stats"), f"{context} stats"),
            config=self._parse_config(config_data, f"{context} config"),
            scenes=self._parse_scenes(scenes_data, context),
            metadata=metadata,
            scene_order=scene_order,
            created_at=self._parse_timestamp(metadata.created_at),
            updated_at=self._parse_timestamp(metadata.updated_at),
        )

    def _parse_config(self, data: dict[str, object], context: str) -> StoryConfigDef:
        variables_data = self._require_mapping(
            data.get("defaultVariables", {}), f"{context} defaultVariables"
        )
        variables = {
            name: self._parse_variable(value, f"{context} defaultVariables.{name}")
            for name, value in variables_data.items()
        }
        achievements: List[AchievementDef] = []
        for index, entry in enumerate(self._require_list(data.get("achievements", []), f"{context} achievements")):
            entry_ctx = f"{context} achievements[{index}]"
            mapping = self._require_mapping(entry, entry_ctx)
            achievements.append(
                AchievementDef(
                    id=self._require_str(mapping.get("id"), f"{entry_ctx} id"),
                    name=self._require_str(mapping.get("name"), f"{entry_ctx} name"),
                    description=self._require_str(mapping.get("description", ""), f"{entry_ctx} description"),
                    hidden=self._require_bool(mapping.get("hidden", False), f"{entry_ctx} hidden"),
                )
            )
        endings: List[EndingDef] = []
        for index, entry in enumerate(self._require_list(data.get("endings", []), f"{context} endings")):
            entry_ctx = f"{context} endings[{index}]"
            mapping = self._require_mapping(entry, entry_ctx)
            endings.append(
                EndingDef(
                    id=self._require_str(mapping.get("id"), f"{entry_ctx} id"),
                    name=self._require_str(mapping.get("name"), f"{entry_ctx} name"),
                    description=self._require_str(mapping.get("description", ""), f"{entry_ctx} description"),
                    conditions=self._parse_conditions(
                        mapping.get("conditions"),
                        f"{entry_ctx} conditions",
                        variables_key="variables",
                        achievements_key="achievements",
                    )
                    or ConditionsDef(),
                )
            )
        return StoryConfigDef(
            start_scene=self._require_str(data.get("startScene"), f"{context} startScene"),
            default_variables=variables,
            achievements=achievements,
            endings=endings,
        )

    def _parse_variable(self, raw: object, context: str) -> StoryVariableDef:
        data = self._require_mapping(raw, context)
        return StoryVariableDef(
            value=self._require_int(data.get("value", 0), f"{context} value"),
            min=self._optional_int(data.get("min"), f"{context} min"),
            max=self._optional_int(data.get("max"), f"{context} max"),
            hidden=self._require_bool(data.get("hidden", False), f"{context} hidden"),
            display_name=self._optional_str(data.get("displayName"), f"{context} displayName"),
        )

    def _parse_scenes(self, data: dict[str, object], context: str) -> Dict[str, SceneDef]:
        scenes: Dict[str, SceneDef] = {}
        for scene_id, raw_scene in data.items():
            scene_ctx = f"{context} scene '{scene_id}'"
            scene_data = self._require_mapping(raw_scene, scene_ctx)
            declared_id = scene_data.get("id", scene_id)
            if declared_id != scene_id:
                raise DataReferenceError(f"{scene_ctx} declares id '{declared_id}'.")
            scenes[scene_id] = SceneDef(
                id=scene_id,
                title=self._require_str(scene_data.get("title", ""), f"{scene_ctx} title"),
                content=self._require_str(scene_data.get("content", ""), f"{scene_ctx} content"),
                choices=self._parse_choices(scene_data.get("choices"), scene_ctx),
                next_scene=self._optional_str(scene_data.get("nextScene"), f"{scene_ctx} nextScene"),
                conditions=self._parse_conditions(scene_data.get("conditions"), f"{scene_ctx} conditions"),
                content_variables=self._parse_content_variables(
                    scene_data.get("contentVariables"), f"{scene_ctx} contentVariables"
                ),
                atmosphere=self._parse_atmosphere(scene_data.get("atmosphere"), f"{scene_ctx} atmosphere"),
            )
        return scenes

    def _parse_choices(self, raw_choices: object, scene_ctx: str) -> List[ChoiceDef]:
        if raw_choices is None:
            return []
        choices: List[ChoiceDef] = []
        for index, entry in enumerate(self._require_list(raw_choices, f"{scene_ctx} choices")):
            choice_ctx = f"{scene_ctx} choices[{index}]"
            mapping = self._require_mapping(entry, choice_ctx)
            choices.append(
                ChoiceDef(
                    id=self._require_str(mapping.get("id"), f"{choice_ctx} id"),
                    text=self._require_str(mapping.get("text"), f"{choice_ctx} text"),
                    next_scene=self._require_str(mapping.get("nextScene"), f"{choice_ctx} nextScene"),
                    consequences=self._parse_consequences(
                        mapping.get("consequences"), f"{choice_ctx} consequences"
                    ),
                    conditions=self._parse_conditions(mapping.get("conditions"), f"{choice_ctx} conditions"),
                )
            )
        return choices

    def _parse_consequences(self, raw: object, context: str) -> ConsequencesDef | None:
        if raw is None:
            return None
        data = self._require_mapping(raw, context)
        deltas = self._require_mapping(data.get("variables", {}), f"{context} variables")
        return ConsequencesDef(
            variables={
                name: self._require_int(delta, f"{context} variables.{name}")
                for name, delta in deltas.items()
            },
            achievements=self._require_str_list(data.get("achievements", []), f"{context} achievements"),
        )

    def _parse_conditions(
        self,
        raw: object,
        context: str,
        *,
        variables_key: str = "requiredVariables",
        achievements_key: str = "requiredAchievements",
    ) -> ConditionsDef | None:
        if raw is None:
            return None
        data = self._require_mapping(raw, context)
        return ConditionsDef(
            required_variables=self._parse_ranges(data.get(variables_key, {}), f"{context} {variables_key}"),
            required_achievements=self._require_str_list(
                data.get(achievements_key, []), f"{context} {achievements_key}"
            ),
        )

    def _parse_ranges(self, raw: object, context: str) -> Dict[str, VariableRange]:
        data = self._require_mapping(raw, context)
        ranges: Dict[str, VariableRange] = {}
        for name, bounds in data.items():
            bounds_data = self._require_mapping(bounds, f"{context}.{name}")
            ranges[name] = VariableRange(
                min=self._optional_int(bounds_data.get("min"), f"{context}.{name} min"),
                max=self._optional_int(bounds_data.get("max"), f"{context}.{name} max"),
            )
        return ranges

    def _parse_content_variables(self, raw: object, context: str) -> Dict[str, ContentVariableDef]:
        if raw is None:
            return {}
        data = self._require_mapping(raw, context)
        variants: Dict[str, ContentVariableDef] = {}
        for key, entry in data.items():
            entry_ctx = f"{context}.{key}"
            mapping = self._require_mapping(entry, entry_ctx)
            conditions: List[ContentConditionDef] = []
            for index, candidate in enumerate(
                self._require_list(mapping.get("conditions", []), f"{entry_ctx} conditions")
            ):
                candidate_ctx = f"{entry_ctx} conditions[{index}]"
                candidate_data = self._require_mapping(candidate, candidate_ctx)
                conditions.append(
                    ContentConditionDef(
                        variables=self._parse_ranges(
                            candidate_data.get("variables", {}), f"{candidate_ctx} variables"
                        ),
                        text=self._require_str(candidate_data.get("text"), f"{candidate_ctx} text"),
                    )
                )
            variants[key] = ContentVariableDef(
                default_text=self._require_str(mapping.get("defaultText", ""), f"{entry_ctx} defaultText"),
                conditions=conditions,
            )
        return variants

    def _parse_atmosphere(self, raw: object, context: str) -> AtmosphereDef | None:
        if raw is None:
            return None
        data = self._require_mapping(raw, context)
        return AtmosphereDef(
            mood=self._optional_str(data.get("mood"), f"{context} mood"),
            music=self._optional_str(data.get("music"), f"{context} music"),
            background=self._optional_str(data.get("background"), f"{context} background"),
        )

    def _parse_stats(self, raw: object, context: str) -> StoryStatsDef:
        if raw is None:
            return StoryStatsDef()
        data = self._require_mapping(raw, context)
        rating = data.get("rating", 0.0)
        if isinstance(rating, bool) or not isinstance(rating, (int, float)):
            raise DataValidationError(f"{context} rating must be a number.")
        return StoryStatsDef(
            rating=float(rating),
            plays=self._require_int(data.get("plays", 0), f"{context} plays"),
            completions=self._require_int(data.get("completions", 0), f"{context} completions"),
            average_play_time=self._require_int(
                data.get("averagePlayTime", 0), f"{context} averagePlayTime"
            ),
        )

    def _parse_metadata(self, raw: object, context: str) -> StoryMetadataDef:
        if raw is None:
            return StoryMetadataDef()
        data = self._require_mapping(raw, context)
        return StoryMetadataDef(
            created_at=self._require_str(data.get("createdAt", ""), f"{context} createdAt"),
            updated_at=self._require_str(data.get("updatedAt", ""), f"{context} updatedAt"),
            version=self._require_str(data.get("version", "1.0.0"), f"{context} version"),
            estimated_read_time=self._require_int(
                data.get("estimatedReadTime", 0), f"{context} estimatedReadTime"
            ),
            difficulty=self._require_str(data.get("difficulty", "Medium"), f"{context} difficulty"),
            genre=self._require_str_list(data.get("genre", []), f"{context} genre"),
            is_published=self._require_bool(data.get("isPublished", False), f"{context} isPublished"),
            content_warnings=self._require_str_list(
                data.get("contentWarnings", []), f"{context} contentWarnings"
            ),
            age_rating=self._optional_str(data.get("ageRating"), f"{context} ageRating"),
        )

    @staticmethod
    def _parse_timestamp(value: str) -> datetime:
        if not value:
            return datetime.now(timezone.utc)
        try:
            parsed = datetime.fromisoformat(value)
        except ValueError as exc:
            raise DataValidationError(f"Invalid timestamp '{value}'.") from exc
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=timezone.utc)
        return parsed

    @staticmethod
    def _require_str(value: object, context: str) -> str:
        if not isinstance(value, str):
            raise DataValidationError(f"{context} must be a string.")
        return value

    @staticmethod
    def _optional_str(value: object, context: str) -> str | None:
        if value is None:
            return None
        if not isinstance(value, str):
            raise DataValidationError(f"{context} must be a string if provided.")
        return value

    @staticmethod
    def _require_int(value: object, context: str) -> int:
        if isinstance(value, bool) or not isinstance(value, int):
            raise DataValidationError(f"{context} must be an integer.")
        return value

    @classmethod
    def _optional_int(cls, value: object, context: str) -> int | None:
        if value is None:
            return None
        return cls._require_int(value, context)

    @classmethod
    def _require_bool(cls, value: object, context: str) -> bool:
        return bool(cls._require_type(value, bool, context))

    @classmethod
    def _require_list(cls, value: object, context: str) -> list:
        if not isinstance(value, list):
            raise DataValidationError(f"{context} must be a list if provided.")
        return value

    @classmethod
    def _require_str_list(cls, value: object, context: str) -> List[str]:
        items = cls._require_list(value, context)
        return [cls._require_str(item, f"{context}[{index}]") for index, item in enumerate(items)]
