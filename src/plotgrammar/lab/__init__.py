"""
plotgrammar.lab — the bubble chart workshop.

## Responsibilities
- Define the workshop's named checkpoints (plotgrammar.lab.workshop).
- Provide the `plotgrammar-workshop` CLI (list / render / show-data).
- Ship the bundled dataset sample under `data/`.

## Notes
- This package is imported for its data files by plotgrammar.io; keep this module free
  of imports.
"""
