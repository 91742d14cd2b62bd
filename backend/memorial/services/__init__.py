# Services package init
"""
Memorial Backend - Services Layer
==================================

What:  Business logic between the routes (HTTP) and external collaborators.

Service Inventory:
    - compositor:        Pure grid layout and flattening (no I/O)
    - TileService:       Parallel profile-picture fetch with placeholder fallback
    - PinningService:    Pinata pinFileToIPFS / pinJSONToIPFS client
    - EngagerService:    Mocked engager lookup table
    - MemorialService:   Orchestrates tiles → composite → pin image → pin metadata
"""
