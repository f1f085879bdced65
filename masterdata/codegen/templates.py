"""jinja2 templates of the generated Python modules.

Rendered with trim_blocks/lstrip_blocks and StrictUndefined; every value that
lands inside a string literal goes through the ``pystr`` filter.
"""

HEADER = "# DON'T EDIT. THIS IS GENERATED AUTOMATICALLY.\n"

TYPE_TEMPLATE = HEADER + """from enum import IntEnum

__all__ = [
{% for enum in enums %}
    {{ enum.name | pystr }},
{% endfor %}
]
{% for enum in enums %}


class {{ enum.name }}(IntEnum):
{% for member in enum.members %}
    {{ member.name }} = {{ member.value }}
{% endfor %}
{% endfor %}
"""

VO_TEMPLATE = HEADER + """from __future__ import annotations

from dataclasses import dataclass
{% if enum_imports %}

from {{ base_namespace }}.Type.Generated.{{ schema_name }}Type import {{ enum_imports | join(", ") }}
{% endif %}


@dataclass
class {{ sheet_name }}VO:
{% for field in fields %}
    {{ field.name }}: {{ field.annotation }} = {{ field.default }}{% if field.comment %}  # {{ field.comment }}{% endif %}

{% endfor %}

    def get_key(self) -> {{ key.annotation }}:
        return self.{{ key.name }}
"""

DTO_TEMPLATE = HEADER + """from masterdata.runtime import MasterDataContainer

{% if key.enum %}
from {{ base_namespace }}.Type.Generated.{{ schema_name }}Type import {{ key.annotation }}
{% endif %}
from {{ base_namespace }}.VO.Generated.{{ schema_name }}.{{ sheet_name }}VO import {{ sheet_name }}VO


class {{ sheet_name }}DTO(MasterDataContainer[{{ sheet_name }}VO, {{ key.annotation }}]):
    record_type = {{ sheet_name }}VO
"""

DAO_TEMPLATE = HEADER + """from masterdata.runtime import MasterDataAccessor

{% if key.enum %}
from {{ base_namespace }}.Type.Generated.{{ schema_name }}Type import {{ key.annotation }}
{% endif %}
from {{ base_namespace }}.DTO.Generated.{{ schema_name }}.{{ sheet_name }}DTO import {{ sheet_name }}DTO
from {{ base_namespace }}.VO.Generated.{{ schema_name }}.{{ sheet_name }}VO import {{ sheet_name }}VO


class {{ sheet_name }}DAO(MasterDataAccessor[{{ sheet_name }}DTO, {{ sheet_name }}VO, {{ key.annotation }}]):
    container_type = {{ sheet_name }}DTO

    def get_asset_path(self) -> str:
        return {{ asset_path | pystr }}

    def get_name(self) -> str:
        return {{ sheet_name | pystr }}
"""

EXPORTER_TEMPLATE = HEADER + """from masterdata.runtime import MasterDataExporter

{% for sheet_name in sheet_names %}
from {{ base_namespace }}.DTO.Generated.{{ schema_name }}.{{ sheet_name }}DTO import {{ sheet_name }}DTO
{% endfor %}


class {{ schema_name }}Exporter(MasterDataExporter):
    source_path = {{ source_path | pystr }}
    asset_root = {{ asset_root | pystr }}
    schema_name = {{ schema_name | pystr }}
    containers = {
{% for sheet_name in sheet_names %}
        {{ sheet_name | pystr }}: {{ sheet_name }}DTO,
{% endfor %}
    }
"""

REGISTRY_TEMPLATE = HEADER + """from masterdata.runtime import MasterDataRegistry

{% for accessor in accessors %}
from {{ base_namespace }}.DAO.Generated.{{ accessor.schema_name }}.{{ accessor.sheet_name }}DAO import {{ accessor.sheet_name }}DAO{% if accessor.alias %} as {{ accessor.alias }}{% endif %}

{% endfor %}

ACCESSOR_TYPES = (
{% for accessor in accessors %}
    {{ accessor.alias or (accessor.sheet_name ~ "DAO") }},
{% endfor %}
)


def create_registry() -> MasterDataRegistry:
    return MasterDataRegistry(accessor_type() for accessor_type in ACCESSOR_TYPES)
"""

TEMPLATES = {
    "type.py.j2": TYPE_TEMPLATE,
    "vo.py.j2": VO_TEMPLATE,
    "dto.py.j2": DTO_TEMPLATE,
    "dao.py.j2": DAO_TEMPLATE,
    "exporter.py.j2": EXPORTER_TEMPLATE,
    "registry.py.j2": REGISTRY_TEMPLATE,
}
