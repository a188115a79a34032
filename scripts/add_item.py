#!/usr/bin/env python3
"""
Cadastrar um item diretamente no backend configurado (STORAGE_BACKEND).

Uso:
  python scripts/add_item.py --name "iPhone" --category phone --image caminho/foto.jpg
"""
from __future__ import annotations

import argparse
import sys
from pathlib import Path

# Garantir que o pacote catalog_api seja importável quando rodado diretamente
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from catalog_api.core.config import get_settings
from catalog_api.core.logging import configure_logging
from catalog_api.db.create_tables import ensure_sqlite_dir, init_db
from catalog_api.db.session import get_engine
from catalog_api.repositories import build_image_store, build_item_repository
from catalog_api.services.item_service import ItemService


def main() -> None:
    ap = argparse.ArgumentParser(description="Cadastrar item no catalogo")
    ap.add_argument("--name", required=True, help="Nome do item (ex.: iPhone)")
    ap.add_argument("--category", required=True, help="Categoria (ex.: phone)")
    ap.add_argument("--image", required=True, help="Arquivo de imagem (.jpg)")
    args = ap.parse_args()

    image_path = Path(args.image)
    if not image_path.is_file():
        raise SystemExit(f"Arquivo nao encontrado: {image_path}")

    settings = get_settings()
    logger = configure_logging(settings.log_level)
    if settings.storage_backend == "sql":
        ensure_sqlite_dir(settings.database_url)
        init_db(get_engine(settings.database_url), settings.schema_path)

    svc = ItemService(
        build_item_repository(settings),
        build_image_store(settings),
        logger=logger.getChild("cli"),
        max_upload_bytes=settings.max_upload_bytes,
    )
    item, message = svc.add_item(args.name, args.category, image_path.read_bytes())
    print(f"OK: {message}")
    print(f"  ID: {item.id} ({settings.storage_backend})")
    print(f"  Imagem: {item.image}")


if __name__ == "__main__":
    try:
        main()
    except Exception as exc:  # pragma: no cover - uso CLI
        sys.stderr.write(f"Erro: {exc}\n")
        raise SystemExit(1)
