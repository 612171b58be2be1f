"""
A typed resource registry: self-describing, ownership-linked resources and a
store that persists and retrieves them by reference.

```python
from controlplane.resource import Namespace, Project
from controlplane.store import InMemoryStore

store = InMemoryStore()
project = Project.new("default")
store.write(project)
store.write(Namespace.new(project.resource_ref(), "default"))
```
"""

__all__ = [
    "config",
    "exceptions",
    "resource",
    "store",
]
