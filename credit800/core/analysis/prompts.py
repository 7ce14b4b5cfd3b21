"""Prompts sent with the report PDF to the analysis models."""

GEMINI_PROMPT = """\
You are a credit report analyzer. Your task is to extract ALL negative/derogatory items from this credit report with 100% accuracy.

STEP 1: Identify the credit bureau (Equifax, Experian, or TransUnion) from the report header/branding.
STEP 2: Find the credit score if displayed in the report.
STEP 3: Extract EVERY account that has ANY of these negative indicators:
- Status contains: Collection, Charge-off, Charged off, Past due, Delinquent, Late, Written off, Sold, Transferred, Closed negative, Settled, Repossession, Foreclosure, Bankruptcy, Judgment, Tax lien
- Payment status shows any late payments (30, 60, 90, 120+ days)
- Account is marked as derogatory or adverse
- Balance owed on collection accounts
- Any account with negative remarks

STEP 4: For EACH negative account found, extract:
- creditorName: The company name
- accountNumber: Full or partial account number shown
- accountType: Collection, Credit Card, Auto Loan, Mortgage, Student Loan, Medical, Personal Loan, Utility, etc.
- balance: Current balance owed (number only, no $ or commas)
- status: The account status (COLLECTION, CHARGE_OFF, LATE, DELINQUENT, etc.)
- dateOpened: Date opened or date of first delinquency (YYYY-MM-DD format)
- disputeReason: Why this item may be disputable

IMPORTANT RULES:
- Do NOT skip any negative items - be thorough
- Include ALL collections, even medical or small amounts
- Use exact creditor names as shown in the report
- If a field is not found, use null
- Balance should be a number (0 if unknown)

Return a JSON object with this EXACT structure:
{
  "bureau": "Equifax",
  "score": 650,
  "items": [
    {
      "creditorName": "Example Collections",
      "accountNumber": "****1234",
      "accountType": "Collection",
      "balance": 1500,
      "status": "COLLECTION",
      "dateOpened": "2020-01-15",
      "disputeReason": "Debt validation required - verify debt ownership"
    }
  ]
}

Return ONLY the JSON object. No explanations, no markdown code blocks, just the raw JSON.
"""

CLAUDE_PROMPT = """\
You are an expert credit report analyst. Analyze this credit report PDF and extract ALL account information.

For EACH account/tradeline found, extract all fields. Determine if disputable and what removal strategies apply.

Return valid JSON in this exact format:
{
  "items": [
    {
      "creditorName": "Company Name",
      "originalCreditor": null,
      "accountNumber": "****1234",
      "accountType": "Collection",
      "balance": 1500,
      "originalBalance": null,
      "creditLimit": null,
      "status": "COLLECTION",
      "dateOpened": "2020-01-15",
      "dateOfFirstDelinquency": null,
      "lastActivityDate": null,
      "latePayments": [],
      "isDisputable": true,
      "disputeReason": "Collection account - request debt validation",
      "removalStrategies": [
        { "method": "Debt Validation", "description": "Request proof of debt ownership", "priority": "HIGH", "successRate": "70%" }
      ],
      "bureau": "EQUIFAX"
    }
  ],
  "creditScore": 650,
  "summary": { "totalAccounts": 5, "negativeItems": 3, "collections": 2, "latePayments": 1, "totalDebt": 5000, "potentialRemovalAmount": 3000 }
}

Return ONLY the JSON, no other text.
"""

RESPONSE_PARSE_PROMPT = """\
You are a credit dispute expert. A user has uploaded a bureau response letter.
Extract the following information from the letter:

1. Outcome: what did the bureau decide? (one of: "deleted", "verified", "updated", "no_response")
   - deleted: the account/item was removed from the report
   - verified: the bureau confirmed the item is accurate
   - updated: the bureau modified the information
   - no_response: the letter indicates no investigation was done or this is unclear
2. Creditor/company name mentioned in the letter
3. Bureau name (Equifax, Experian, or TransUnion)
4. Date of the letter or response date
5. Key language: the most important 1-2 sentences from the letter (e.g., the decision statement)

Return ONLY valid JSON in this exact format:
{
  "outcome": "deleted" | "verified" | "updated" | "no_response",
  "creditorName": "string or null",
  "bureauName": "Equifax" | "Experian" | "TransUnion" | null,
  "responseDate": "YYYY-MM-DD or null",
  "keyLanguage": "string or null"
}"""
