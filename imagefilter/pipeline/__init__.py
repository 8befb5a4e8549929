from .filter_pipeline import FilterPipeline
