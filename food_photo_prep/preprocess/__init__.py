"""Pipeline stages. Each takes a Raster and returns a new one, or the same one when skipped."""
