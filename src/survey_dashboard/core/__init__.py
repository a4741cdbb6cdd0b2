"""
Core data layer.

This package contains:
- models: summary records, metadata and pivoted rows
- data_loader: load summaries.json + metadata.json into a RecordStore
- reshape: filter, partition, group discovery and pivot
- selection: demographic / view selection and full recomputation
- notes: footnotes and titles derived from the active view
"""
