from __future__ import annotations

from plugin_evals import FixtureDefinition

PAYFLOW_CONTEXT = """A fintech startup building instant B2B payment infrastructure.
- Problem: B2B payments take 30-90 days to settle, causing cash flow issues
- Solution: Real-time payment rails for business invoices
- Target: Small and medium businesses ($50K-$10M annual revenue)
- Competitors: Bill.com, Stripe, traditional banks"""

MANIFEST = [
    FixtureDefinition(
        fixture="market-analysis-quicktest.md",
        template="market-analysis",
        startup="QuickTest",
        document_type="market-analysis",
        context="""A B2B SaaS startup building AI-powered expense tracking.
- Problem: Manual expense tracking wastes 5 hours/week for small businesses
- Solution: AI-powered receipt scanning and categorization
- Target: Small businesses with 5-50 employees
- Competitors: Expensify, QuickBooks""",
    ),
    FixtureDefinition(
        fixture="business-brief-payflow.md",
        template="business-brief",
        startup="PayFlow",
        document_type="business-brief",
        context=PAYFLOW_CONTEXT,
    ),
    FixtureDefinition(
        fixture="business-plan-payflow.md",
        template="business-plan",
        startup="PayFlow",
        document_type="business-plan",
        context=f"""{PAYFLOW_CONTEXT}
- Revenue model: Transaction fees (0.5%) + SaaS subscription ($99/mo)
- Funding ask: $2M seed for 18-month runway""",
    ),
]
