"""
API tests package for AutoParts backend.

Contains tests for the HTTP surface:
- Parts (listing filters, storefront browse, facets, detail)
- Vehicles (search, select-box options, detail)
- Admin (vehicle CRUD, CSV import, part maintenance, stock)
- Health probes
"""
