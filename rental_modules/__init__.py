"""
Rental lifecycle modules.

Each subpackage owns one part of the rental operation:

- units     -- rentable units, occupancy and rent values
- tenants   -- tenant registry
- leases    -- contracts, renewals and rent adjustments
- payments  -- payment schedule, ledger and due-day changes

Subpackage ``__init__`` modules export config and models only.  Services are
imported from their own modules (``rental_modules.leases.service``) so that
importing a model never pulls in the persistence stack of another module.
"""
