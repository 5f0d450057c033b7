import json
from pathlib import Path

from tw_bridge.catalog import BlockCatalog, BlockChoice


def test_from_pairs_skips_malformed_and_duplicate_entries() -> None:
    catalog = BlockCatalog.from_pairs(
        [["Stone", "stone"], ["Stone again", "STONE"], ["only one"], ["", "dirt"], ("Oak Planks", "oak_planks")]
    )

    assert catalog.choices == [BlockChoice("Stone", "stone"), BlockChoice("Oak Planks", "oak_planks")]


def test_resolve_accepts_ids_and_display_names() -> None:
    catalog = BlockCatalog.from_mapping({"oak_planks": "Oak Planks", "stone": "Stone"})

    assert catalog.resolve("OAK_PLANKS") == "oak_planks"
    assert catalog.resolve(" oak planks ") == "oak_planks"
    assert catalog.resolve("glass") == "glass"
    assert catalog.display_name("stone") == "Stone"
    assert catalog.display_name("glass") is None


def test_load_reads_pairs_or_mapping(tmp_path: Path) -> None:
    pairs = tmp_path / "pairs.json"
    pairs.write_text(json.dumps([["Stone", "stone"]]), encoding="utf-8")
    mapping = tmp_path / "mapping.json"
    mapping.write_text(json.dumps({"glass": "Glass"}), encoding="utf-8")

    assert BlockCatalog.load(pairs).menu_items() == [{"text": "Stone", "value": "stone"}]
    assert len(BlockCatalog.load(mapping)) == 1
