#!/usr/bin/env python3
"""
Sample data generator for testing the Error Code Viewer application.

Generates, from the bundled error database:
- One errores.json per brand/model (the DATABASES_DIR layout)
- A folders.json catalog for that layout
- CSV, XLSX and XML exports for the File Viewer
- A few deliberately broken files to exercise error handling
"""

import argparse
import json
from pathlib import Path
from xml.etree import ElementTree as ET

import numpy as np
import pandas as pd

from errorcode_viewer.config import PACKAGE_DATA_DIR
from errorcode_viewer.core import ErrorRecord, load_records, resolve_dataset_path


def records_frame(records: list[ErrorRecord]) -> pd.DataFrame:
    """Flatten records into one row each; list fields joined by '; '."""
    return pd.DataFrame([
        {
            "brand": r.brand,
            "brandName": r.brand_name,
            "model": r.model,
            "errorCode": r.error_code,
            "title": r.title,
            "description": r.description,
            "causes": "; ".join(r.causes),
            "solutions": "; ".join(r.solutions),
            "severity": r.severity,
        }
        for r in records
    ])


def generate_model_datasets(records: list[ErrorRecord], output_dir: Path, filename: str):
    """Write one dataset per brand/model plus the catalog listing them."""
    catalog: dict[str, list[str]] = {}
    grouped: dict[tuple[str, str], list[dict]] = {}

    for r in records:
        models = catalog.setdefault(r.brand, [])
        if r.model not in models:
            models.append(r.model)
        grouped.setdefault((r.brand, r.model), []).append(r.to_dict())

    for (brand, model), items in grouped.items():
        path = resolve_dataset_path(output_dir, brand, model, filename)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(items, ensure_ascii=False, indent=2), encoding="utf-8")
        print(f"Generated: {path} ({len(items)} records)")

    folders = [
        {"name": brand, "folders": [{"name": model} for model in models]}
        for brand, models in catalog.items()
    ]
    catalog_path = output_dir / "folders.json"
    catalog_path.write_text(json.dumps(folders, ensure_ascii=False, indent=2), encoding="utf-8")
    print(f"Generated: {catalog_path} ({len(folders)} brands)")


def generate_csv(records: list[ErrorRecord], output_path: Path):
    df = records_frame(records)
    df.to_csv(output_path, index=False)
    print(f"Generated: {output_path} ({len(df)} rows, {len(df.columns)} columns)")


def generate_xlsx(records: list[ErrorRecord], output_path: Path):
    df = records_frame(records)
    df.to_excel(output_path, index=False, engine="openpyxl")
    print(f"Generated: {output_path} ({len(df)} rows, {len(df.columns)} columns)")


def generate_xml(records: list[ErrorRecord], output_path: Path):
    """Nested brand > model > error elements with attributes."""
    root = ET.Element("errorCodes")
    brands: dict[str, ET.Element] = {}
    models: dict[tuple[str, str], ET.Element] = {}

    for r in records:
        if r.brand not in brands:
            brands[r.brand] = ET.SubElement(root, "brand", id=r.brand, name=r.brand_name)
        key = (r.brand, r.model)
        if key not in models:
            models[key] = ET.SubElement(brands[r.brand], "model", name=r.model)

        error = ET.SubElement(models[key], "error", code=r.error_code, severity=r.severity)
        ET.SubElement(error, "title").text = r.title
        ET.SubElement(error, "description").text = r.description
        causes = ET.SubElement(error, "causes")
        for cause in r.causes:
            ET.SubElement(causes, "cause").text = cause

    tree = ET.ElementTree(root)
    ET.indent(tree)
    tree.write(output_path, encoding="utf-8", xml_declaration=True)
    print(f"Generated: {output_path} ({len(records)} errors)")


def generate_readings(output_path: Path, num_rows: int = 250):
    """A larger numeric CSV to exercise paging."""
    rng = np.random.default_rng(42)
    df = pd.DataFrame({
        "timestamp": pd.date_range("2024-01-01", periods=num_rows, freq="min").astype(str),
        "drive": rng.choice(["ATV320", "ACS880", "FR-F800"], num_rows),
        "dc_bus_v": np.round(560 + rng.normal(0, 8, num_rows), 1),
        "temp_c": np.round(40 + rng.normal(0, 3, num_rows), 1),
        "fault": rng.choice(["", "", "", "F0001", "F0022", "E.OC1"], num_rows),
    })
    df.to_csv(output_path, index=False)
    print(f"Generated: {output_path} ({num_rows} rows)")


def generate_broken_files(output_dir: Path):
    """Files each adapter must reject."""
    (output_dir / "broken.json").write_text('{"not": "an array"}', encoding="utf-8")
    (output_dir / "broken.xml").write_text("<errors><error></errors>", encoding="utf-8")
    (output_dir / "empty.csv").write_text("", encoding="utf-8")
    (output_dir / "notes.txt").write_text("unsupported format", encoding="utf-8")
    print(f"Generated: broken.json, broken.xml, empty.csv, notes.txt in {output_dir}")


def main():
    parser = argparse.ArgumentParser(description="Generate sample data for Error Code Viewer")
    parser.add_argument(
        "--output-dir", "-o",
        type=Path,
        default=Path("sample_data"),
        help="Output directory for generated files"
    )
    parser.add_argument(
        "--database",
        type=Path,
        default=PACKAGE_DATA_DIR / "error_database.json",
        help="Error database to export"
    )
    parser.add_argument(
        "--dataset-filename",
        default="errores.json",
        help="File name of each per-model dataset"
    )
    parser.add_argument(
        "--broken",
        action="store_true",
        help="Also generate files that fail to load"
    )

    args = parser.parse_args()

    records = load_records(args.database)

    # Create output directories
    databases_dir = args.output_dir / "databases"
    files_dir = args.output_dir / "files"
    databases_dir.mkdir(parents=True, exist_ok=True)
    files_dir.mkdir(parents=True, exist_ok=True)

    generate_model_datasets(records, databases_dir, args.dataset_filename)
    generate_csv(records, files_dir / "error_codes.csv")
    generate_xlsx(records, files_dir / "error_codes.xlsx")
    generate_xml(records, files_dir / "error_codes.xml")
    generate_readings(files_dir / "drive_readings.csv")

    if args.broken:
        generate_broken_files(files_dir)

    print(f"\nAll files generated in: {args.output_dir.absolute()}")
    print("\nUsage guide:")
    print(f"1. Set ERRORCODE_VIEWER_DATA_SOURCE=local and ERRORCODE_VIEWER_DATABASES_DIR={databases_dir.absolute()}")
    print("2. Pick a brand and model in the Error Codes tab to load its dataset")
    print(f"3. Import the files in '{files_dir}' together in the File Viewer")


if __name__ == "__main__":
    main()
