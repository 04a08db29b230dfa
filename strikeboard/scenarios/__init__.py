"""
Scenarios - bulk import and export of the scenario catalog

    - upload_parser: normalizes an uploaded document into an ImportBatch
    - import_reconciler: drives one import from file selection to result
    - exporter: fetches snapshots and writes the downloadable document
"""
