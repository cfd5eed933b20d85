"""site_mapper.parser: HTML scanning helpers."""
