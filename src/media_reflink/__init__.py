"""media-reflink -- match downloaded media folders to library folders and reflink them.

Core modules:
    signals   -- Which directory entries count as evidence (media files, "Season"
                 folders, long descriptive folder names). Best-effort listing.
    cache     -- ContentCache trees of each target's signal names, built lazily by
                 CacheRegistry at most once per run.
    matcher   -- Staged lookup of a source folder's target: warm caches first,
                 then forced indexing of remaining targets. First match wins.
    walker    -- Resolve every eligible record in the assignment list and write
                 results back by MapPath.
    discovery -- New source entries (file/dir/nested/skip) and library targets.
    state     -- YAML mapping file with atomic writes.
    reflink   -- cp --reflink=always wrapper (Linux only).
    runner    -- One discover -> match -> copy -> save pass.
    config    -- Configuration via pydantic-settings (REFLINK_* env vars)
    cli       -- Click CLI entry point.
"""
