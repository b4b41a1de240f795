"""
Bond Valuation Engine

Modules:
- rates: nominal/effective rate conversion + discount factors
- bonds: bond terms, input QC, bullet cash-flow schedule with grace periods
- risk: present value / Macaulay + modified duration / convexity
- yields: Newton-Raphson IRR (investor return rate, issuer cost rate)
- valuation: full bond valuation + tabular views
- store: user accounts and bond book collaborators
- config: solver constants and defaults for new bonds

Callers (UI, exporters) should import from this package.
"""
