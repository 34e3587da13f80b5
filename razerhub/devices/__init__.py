"""razerhub.devices — device profiles, categories and device instances.

  - types: category enumeration and display priority
  - catalog: device profile catalog loaded from JSON files
  - base / variants: device instances, one class per category
  - factory: builds an uninitialized device for a catalog match
"""
