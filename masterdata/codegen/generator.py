from __future__ import annotations

import json
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from pathlib import Path

from jinja2 import DictLoader, Environment, StrictUndefined

from ..errors import SchemaShapeError
from ..models.config_models import GeneratorConfig, asset_file_path
from ..models.schema import EnumDefinition, FieldDefinition, SchemaDescription
from ..schema.types import PRIMITIVE_TYPES, is_identifier
from .templates import TEMPLATES

"""Artifact generator: SchemaDescription -> Python source text.

Rendering is a pure function of the descriptions and the GeneratorConfig; the
same input always yields byte-identical text. Writing is left to the caller
(masterdata.codegen.writer) so that every artifact of a sheet can be rendered
before any of them touches the disk.

Layout below ``{code_destination}/MasterData``::

    Type/Generated/{schema}Type.py
    VO/Generated/{schema}/{sheet}VO.py
    DTO/Generated/{schema}/{sheet}DTO.py
    DAO/Generated/{schema}/{sheet}DAO.py
    Editor/Exporter/Generated/{schema}Exporter.py
    Collection/Generated/Registry.py
"""

__all__ = [
    "ArtifactGenerator",
    "RenderedArtifact",
    "RegistryEntry",
    "validate_schema_name",
]


@dataclass(frozen=True)
class RenderedArtifact:
    path: Path
    content: str


@dataclass(frozen=True)
class RegistryEntry:
    schema_name: str
    sheet_name: str


@dataclass(frozen=True)
class _FieldView:
    name: str
    annotation: str
    default: str
    comment: str
    enum: bool


def _pystr(value: str) -> str:
    """Render a Python string literal (double quoted)."""
    return json.dumps(str(value), ensure_ascii=False)


def _field_view(f: FieldDefinition) -> _FieldView:
    if f.enum is not None:
        annotation = f.enum.name
        default = f"{f.enum.name}.{f.enum.members[0].name}"
    else:
        primitive = PRIMITIVE_TYPES[f.declared_type]
        annotation = primitive.annotation
        default = primitive.default
    comment = " ".join(f.comment.split())
    return _FieldView(f.name, annotation, default, comment, f.enum is not None)


class ArtifactGenerator:
    """Renders every generated module from schema descriptions."""

    def __init__(self, config: GeneratorConfig) -> None:
        self.config = config
        self.env = Environment(
            loader=DictLoader(TEMPLATES),
            autoescape=False,  # Python source, not HTML
            undefined=StrictUndefined,
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=True,
        )
        self.env.filters["pystr"] = _pystr

    # ------------------------------------------------------------------ paths
    def type_path(self, schema_name: str) -> Path:
        return self.config.code_root / "Type" / "Generated" / f"{schema_name}Type.py"

    def vo_path(self, schema_name: str, sheet_name: str) -> Path:
        return self.config.code_root / "VO" / "Generated" / schema_name / f"{sheet_name}VO.py"

    def dto_path(self, schema_name: str, sheet_name: str) -> Path:
        return self.config.code_root / "DTO" / "Generated" / schema_name / f"{sheet_name}DTO.py"

    def dao_path(self, schema_name: str, sheet_name: str) -> Path:
        return self.config.code_root / "DAO" / "Generated" / schema_name / f"{sheet_name}DAO.py"

    def exporter_path(self, schema_name: str) -> Path:
        return self.config.code_root / "Editor" / "Exporter" / "Generated" / f"{schema_name}Exporter.py"

    def registry_path(self) -> Path:
        return self.config.code_root / "Collection" / "Generated" / "Registry.py"

    def asset_path(self, schema_name: str, sheet_name: str) -> Path:
        return asset_file_path(self.config.asset_root, schema_name, sheet_name)

    # -------------------------------------------------------------- rendering
    def _render(self, template_name: str, **context: object) -> str:
        return self.env.get_template(template_name).render(
            base_namespace=self.config.base_namespace, **context
        )

    def render_enum_module(
        self,
        descriptions: Iterable[SchemaDescription],
        declared: Iterable[EnumDefinition] = (),
    ) -> str:
        """One module per schema file; an enum used by several sheets is emitted once.

        Args:
            descriptions: sheets whose enum fields are emitted
            declared: every enum declared in the file, including those of
                sheets that failed; emitted first
        """
        enums: dict[str, EnumDefinition] = {enum.name: enum for enum in declared}
        for description in descriptions:
            for enum in description.enums:
                enums.setdefault(enum.name, enum)
        return self._render("type.py.j2", enums=list(enums.values()))

    def render_record(self, description: SchemaDescription) -> str:
        fields = [_field_view(f) for f in description.fields]
        enum_imports: list[str] = []
        for f in fields:
            if f.enum and f.annotation not in enum_imports:
                enum_imports.append(f.annotation)
        return self._render(
            "vo.py.j2",
            schema_name=description.schema_name,
            sheet_name=description.sheet_name,
            fields=fields,
            key=fields[0],
            enum_imports=enum_imports,
        )

    def render_container(self, description: SchemaDescription) -> str:
        return self._render(
            "dto.py.j2",
            schema_name=description.schema_name,
            sheet_name=description.sheet_name,
            key=_field_view(description.key_field),
        )

    def render_accessor(self, description: SchemaDescription) -> str:
        asset_path = self.asset_path(description.schema_name, description.sheet_name)
        return self._render(
            "dao.py.j2",
            schema_name=description.schema_name,
            sheet_name=description.sheet_name,
            key=_field_view(description.key_field),
            asset_path=asset_path.as_posix(),
        )

    def render_exporter(
        self, schema_name: str, source_path: Path, descriptions: Sequence[SchemaDescription]
    ) -> str:
        return self._render(
            "exporter.py.j2",
            schema_name=schema_name,
            source_path=Path(source_path).as_posix(),
            asset_root=self.config.asset_root.as_posix(),
            sheet_names=[d.sheet_name for d in descriptions],
        )

    def render_registry(self, entries: Sequence[RegistryEntry]) -> str:
        """Registry listing every accessor in discovery order.

        Sheets with the same name in different schema files are imported
        under a ``{schema}{sheet}DAO`` alias.
        """
        counts: dict[str, int] = {}
        for e in entries:
            counts[e.sheet_name] = counts.get(e.sheet_name, 0) + 1
        accessors = [
            {
                "schema_name": e.schema_name,
                "sheet_name": e.sheet_name,
                "alias": f"{e.schema_name}{e.sheet_name}DAO" if counts[e.sheet_name] > 1 else "",
            }
            for e in entries
        ]
        return self._render("registry.py.j2", accessors=accessors)

    # ------------------------------------------------------------- groupings
    def sheet_artifacts(self, description: SchemaDescription) -> list[RenderedArtifact]:
        """Record, container and accessor modules of one sheet."""
        schema, sheet = description.schema_name, description.sheet_name
        return [
            RenderedArtifact(self.vo_path(schema, sheet), self.render_record(description)),
            RenderedArtifact(self.dto_path(schema, sheet), self.render_container(description)),
            RenderedArtifact(self.dao_path(schema, sheet), self.render_accessor(description)),
        ]

    def file_artifacts(
        self,
        schema_name: str,
        source_path: Path,
        descriptions: Sequence[SchemaDescription],
        declared_enums: Iterable[EnumDefinition] = (),
    ) -> list[RenderedArtifact]:
        """Enum module and exporter module of one schema file."""
        return [
            RenderedArtifact(
                self.type_path(schema_name), self.render_enum_module(descriptions, declared_enums)
            ),
            RenderedArtifact(
                self.exporter_path(schema_name),
                self.render_exporter(schema_name, source_path, descriptions),
            ),
        ]

    def registry_artifact(self, entries: Sequence[RegistryEntry]) -> RenderedArtifact:
        return RenderedArtifact(self.registry_path(), self.render_registry(entries))


def validate_schema_name(schema_name: str) -> None:
    """Schema file names become module / class name parts."""
    if not is_identifier(schema_name):
        raise SchemaShapeError(
            f"schema file name {schema_name!r} is not a valid identifier", file=schema_name
        )
