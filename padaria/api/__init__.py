"""
Padaria REST API.

Provides DRF views for:
- Auth (register, login with JWT)
- RawMaterial (list + create)
- Recipe (list, detail + atomic create)
- ProductionOrder (CRUD + status actions, kit)
- Kit (read-only + assemble)
"""
