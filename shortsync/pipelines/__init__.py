"""Pipeline orchestrators for ShortSync."""

from shortsync.pipelines.run_assembly import AssemblyPipeline, load_script, main

__all__ = ["AssemblyPipeline", "load_script", "main"]
