"""
Core services for the import calculator.

- types.py: Product, RawProduct, Dimensions, Estimation
- classification.py: retailer detection and category classification
- shipping.py: shipping cost estimation and landed pricing
- learning.py: confidence scoring, trimmed means, save merge rules
- estimation_store.py: ProductStore backends (database, memory, null)
- orchestrator.py: per-URL provider fallback chain
- batch.py: validated, paced batch resolution
"""
