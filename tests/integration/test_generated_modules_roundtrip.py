from __future__ import annotations

import asyncio
import logging
from pathlib import Path

from masterdata.runtime import FileAssetLoader, MasterDataRegistry
from masterdata.services.orchestrator import export_all, generate

"""Generate -> import the generated modules -> export -> load -> query."""


def _generate_and_export(pkg, data_dir: Path):
    gen = generate(data_dir, pkg.code_dest, pkg.asset_dest, pkg.project_code)
    assert not gen.has_failures
    exp = export_all(data_dir, pkg.asset_dest)
    assert not exp.has_failures
    return gen, exp


def test_generated_modules_import_and_load(temp_workdir: Path, game_schema: Path, generated_package):
    _generate_and_export(generated_package, temp_workdir / "data")

    types = generated_package.import_module("Type.Generated.GameType")
    vo = generated_package.import_module("VO.Generated.Game.CharacterVO")
    dao_module = generated_package.import_module("DAO.Generated.Game.CharacterDAO")
    registry_module = generated_package.import_module("Collection.Generated.Registry")

    ElementType = types.ElementType
    assert [(m.name, m.value) for m in ElementType] == [("Fire", 0), ("Water", 1), ("Wind", 5)]
    assert vo.CharacterVO().element is ElementType.Fire

    registry = registry_module.create_registry()
    assert isinstance(registry, MasterDataRegistry)
    assert [a.get_name() for a in registry] == ["Character", "Item"]
    assert registry.load_all(FileAssetLoader()) == []

    characters = registry.get(dao_module.CharacterDAO)
    slime = characters.get(2)
    assert slime.name == "slime"
    assert slime.element is ElementType.Wind
    assert slime.power == 5
    assert slime.rate == 0.25
    assert slime.active is False
    assert slime.get_key() == 2
    assert characters.get(3).name == ""
    assert [c.id for c in characters.find_all(lambda c: c.active)] == [1, 3]

    items = registry.get_by_name("Item")
    assert items.get("ether").element is ElementType.Water
    assert items.to_json() == '{"Item":[{"code":"potion","element":0,"price":10},{"code":"ether","element":1,"price":20}]}'


def test_asset_path_matches_export_location(temp_workdir: Path, game_schema: Path, generated_package):
    _generate_and_export(generated_package, temp_workdir / "data")
    dao_module = generated_package.import_module("DAO.Generated.Game.ItemDAO")
    dao = dao_module.ItemDAO()
    assert Path(dao.get_asset_path()) == generated_package.asset_dest / "MasterData" / "Game" / "Item.asset"
    assert Path(dao.get_asset_path()).exists()


def test_async_load_through_generated_registry(temp_workdir: Path, game_schema: Path, generated_package):
    _generate_and_export(generated_package, temp_workdir / "data")
    registry = generated_package.import_module("Collection.Generated.Registry").create_registry()
    assert asyncio.run(registry.load_all_async(FileAssetLoader())) == []
    assert len(registry.get_by_name("Character")) == 3


def test_duplicate_keys_warn_at_load(temp_workdir: Path, excel_factory, character_rows, generated_package, caplog):
    character_rows.append([2, "king slime", "Water", 50, 1, True])
    excel_factory(temp_workdir / "data" / "Game.xlsx", {"Character": character_rows})
    _generate_and_export(generated_package, temp_workdir / "data")
    registry = generated_package.import_module("Collection.Generated.Registry").create_registry()

    caplog.set_level(logging.WARNING, logger="masterdata")
    registry.load_all(FileAssetLoader())
    dao = registry.get_by_name("Character")
    assert dao.get(2).name == "king slime"
    assert len(dao) == 4
    assert sum("DUPLICATE_KEY" in r.getMessage() for r in caplog.records) == 1


def test_generated_exporter_reexports_its_file(temp_workdir: Path, game_schema: Path, generated_package):
    generate(temp_workdir / "data", generated_package.code_dest, generated_package.asset_dest, generated_package.project_code)
    exporter_module = generated_package.import_module("Editor.Exporter.Generated.GameExporter")
    exporter = exporter_module.GameExporter()
    assert exporter.schema_name == "Game"
    assert list(exporter.containers) == ["Character", "Item"]

    result = exporter.export()
    assert [s.sheet_name for s in result.sheets] == ["Character", "Item"]
    assert all(s.succeeded for s in result.sheets)
    assert (generated_package.asset_dest / "MasterData" / "Game" / "Character.asset").exists()


def test_registry_aliases_sheets_shared_between_files(
    temp_workdir: Path, excel_factory, character_rows, item_rows, generated_package
):
    shop_items = [["code", "price"], [None, None], [None, None], ["string", "int"], ["sword", 100]]
    excel_factory(temp_workdir / "data" / "Game.xlsx", {"Character": character_rows, "Item": item_rows})
    excel_factory(temp_workdir / "data" / "Shop.xlsx", {"Item": shop_items})
    _generate_and_export(generated_package, temp_workdir / "data")
    registry_module = generated_package.import_module("Collection.Generated.Registry")
    assert [t.__name__ for t in registry_module.ACCESSOR_TYPES] == ["CharacterDAO", "ItemDAO", "ItemDAO"]
    registry = registry_module.create_registry()
    assert len(registry) == 3
    registry.load_all(FileAssetLoader())
    shop_dao = registry.get(registry_module.ShopItemDAO)
    assert shop_dao.get("sword").price == 100
