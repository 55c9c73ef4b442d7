"""
State module - immutable run snapshots and the seeded RNG.

Contains:
- rng: Mulberry32, FNV-1a string hashing, scoped streams
- run: GameState and the small records it carries
- screens: node-screen variants and event step payloads
- battle: the battle snapshot the core stores but does not resolve

Import from the submodules directly; generation and state reference each
other, so this package does not re-export.
"""
