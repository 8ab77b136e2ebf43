"""
Engines Layer

- catalog: track/lesson authoring with ensure semantics
- progress: learner cursors and attempt evaluation
"""
