from __future__ import annotations

from pathlib import Path

import pytest

from masterdata.codegen.generator import ArtifactGenerator, RegistryEntry, validate_schema_name
from masterdata.errors import SchemaShapeError
from masterdata.models.config_models import GeneratorConfig
from masterdata.models.grid import Sheet, Workbook
from masterdata.schema.interpreter import interpret_workbook
from masterdata.schema.types import parse_enum_body


@pytest.fixture()
def descriptions(character_rows, item_rows):
    wb = Workbook.from_sheets(
        Path("Game.xlsx"),
        [Sheet.from_rows("Character", character_rows), Sheet.from_rows("Item", item_rows)],
    )
    result, errors = interpret_workbook(wb)
    assert errors == []
    return result


@pytest.fixture()
def generator() -> ArtifactGenerator:
    return ArtifactGenerator(GeneratorConfig(Path("out/code"), Path("out/assets"), "Demo"))


def test_base_namespace():
    assert GeneratorConfig(Path("a"), Path("b"), "Demo").base_namespace == "Demo.MasterData"
    assert GeneratorConfig(Path("a"), Path("b")).base_namespace == "MasterData"


def test_artifact_paths(generator: ArtifactGenerator):
    root = Path("out/code/MasterData")
    assert generator.type_path("Game") == root / "Type/Generated/GameType.py"
    assert generator.vo_path("Game", "Item") == root / "VO/Generated/Game/ItemVO.py"
    assert generator.dto_path("Game", "Item") == root / "DTO/Generated/Game/ItemDTO.py"
    assert generator.dao_path("Game", "Item") == root / "DAO/Generated/Game/ItemDAO.py"
    assert generator.exporter_path("Game") == root / "Editor/Exporter/Generated/GameExporter.py"
    assert generator.registry_path() == root / "Collection/Generated/Registry.py"
    assert generator.asset_path("Game", "Item") == Path("out/assets/MasterData/Game/Item.asset")


def test_record_module(generator: ArtifactGenerator, descriptions):
    text = generator.render_record(descriptions[0])
    assert text.startswith("# DON'T EDIT. THIS IS GENERATED AUTOMATICALLY.\n")
    assert "from Demo.MasterData.Type.Generated.GameType import ElementType\n" in text
    assert "class CharacterVO:\n" in text
    assert "    id: int = 0  # ID\n" in text
    assert '    name: str = ""  # 名前\n' in text
    assert "    element: ElementType = ElementType.Fire  # 属性\n" in text
    assert "    power: int = 0\n" in text
    assert "    rate: float = 0.0\n" in text
    assert "    active: bool = False\n" in text
    assert "    def get_key(self) -> int:\n        return self.id\n" in text
    compile(text, "CharacterVO.py", "exec")


def test_record_module_without_enum_has_no_type_import(generator: ArtifactGenerator):
    rows = [["code", "price"], [], [], ["string", "int"], ["a", "1"]]
    wb = Workbook.from_sheets(Path("Shop.xlsx"), [Sheet.from_rows("Price", rows)])
    (description,), _ = interpret_workbook(wb)
    text = generator.render_record(description)
    assert "Type.Generated" not in text
    assert "    def get_key(self) -> str:\n        return self.code\n" in text
    compile(text, "PriceVO.py", "exec")


def test_container_and_accessor_modules(generator: ArtifactGenerator, descriptions):
    dto = generator.render_container(descriptions[1])
    assert "class ItemDTO(MasterDataContainer[ItemVO, str]):\n    record_type = ItemVO\n" in dto
    assert "from Demo.MasterData.VO.Generated.Game.ItemVO import ItemVO\n" in dto
    dao = generator.render_accessor(descriptions[1])
    assert "class ItemDAO(MasterDataAccessor[ItemDTO, ItemVO, str]):\n" in dao
    assert "    container_type = ItemDTO\n" in dao
    assert 'return "out/assets/MasterData/Game/Item.asset"' in dao
    assert 'return "Item"' in dao
    compile(dto, "ItemDTO.py", "exec")
    compile(dao, "ItemDAO.py", "exec")


def test_enum_key_imports_enum_type(generator: ArtifactGenerator):
    rows = [["kind", "label"], [], ["A\nB", None], ["Kind", "string"], ["A", "x"]]
    wb = Workbook.from_sheets(Path("Misc.xlsx"), [Sheet.from_rows("Labels", rows)])
    (description,), _ = interpret_workbook(wb)
    dto = generator.render_container(description)
    assert "from Demo.MasterData.Type.Generated.MiscType import Kind\n" in dto
    assert "MasterDataContainer[LabelsVO, Kind]" in dto
    compile(dto, "LabelsDTO.py", "exec")


def test_enum_module_deduplicates_by_name(generator: ArtifactGenerator, descriptions):
    text = generator.render_enum_module(descriptions)
    assert text.count("class ElementType(IntEnum):") == 1
    assert "    Fire = 0\n    Water = 1\n    Wind = 5\n" in text
    assert '__all__ = [\n    "ElementType",\n]\n' in text
    compile(text, "GameType.py", "exec")


def test_enum_module_includes_declared_enums_first(generator: ArtifactGenerator, descriptions):
    mood = parse_enum_body("Mood", "Calm\nAngry = 0x10")
    text = generator.render_enum_module(descriptions[1:], declared=[mood])
    assert text.index("class Mood(IntEnum):") < text.index("class ElementType(IntEnum):")
    assert "    Angry = 16\n" in text
    assert '__all__ = [\n    "Mood",\n    "ElementType",\n]\n' in text


def test_exporter_module(generator: ArtifactGenerator, descriptions):
    text = generator.render_exporter("Game", Path("data/Game.xlsx"), descriptions)
    assert "class GameExporter(MasterDataExporter):\n" in text
    assert '    source_path = "data/Game.xlsx"\n' in text
    assert '    asset_root = "out/assets/MasterData"\n' in text
    assert '        "Character": CharacterDTO,\n        "Item": ItemDTO,\n' in text
    compile(text, "GameExporter.py", "exec")


def test_registry_aliases_same_sheet_name_across_files(generator: ArtifactGenerator):
    text = generator.render_registry(
        [RegistryEntry("Game", "Item"), RegistryEntry("Shop", "Item"), RegistryEntry("Game", "Character")]
    )
    assert "import ItemDAO as GameItemDAO\n" in text
    assert "import ItemDAO as ShopItemDAO\n" in text
    assert "import CharacterDAO\n" in text
    assert "    GameItemDAO,\n    ShopItemDAO,\n    CharacterDAO,\n" in text
    compile(text, "Registry.py", "exec")


def test_rendering_is_deterministic(generator: ArtifactGenerator, descriptions):
    first = [a.content for a in generator.sheet_artifacts(descriptions[0])]
    second = [a.content for a in generator.sheet_artifacts(descriptions[0])]
    assert first == second
    assert all("\r" not in text for text in first)


def test_sheet_and_file_artifact_groups(generator: ArtifactGenerator, descriptions):
    sheet = generator.sheet_artifacts(descriptions[0])
    assert [a.path.name for a in sheet] == ["CharacterVO.py", "CharacterDTO.py", "CharacterDAO.py"]
    files = generator.file_artifacts("Game", Path("data/Game.xlsx"), descriptions)
    assert [a.path.name for a in files] == ["GameType.py", "GameExporter.py"]


def test_validate_schema_name():
    validate_schema_name("Game")
    with pytest.raises(SchemaShapeError, match="not a valid identifier"):
        validate_schema_name("game-data")
