"""
ADK agents for the loan application pipeline.

Document collection -> credit analysis -> risk assessment -> final decision,
run in order by a SequentialAgent. Each stage stores its answer in session
state under its output key so later stages can quote it.
"""

from __future__ import annotations

from google.adk.agents import LlmAgent, SequentialAgent

from ..settings import Settings

PIPELINE_NAME = "LoanPipeline"

DOCUMENT_COLLECTOR = "DocumentCollector"
CREDIT_ANALYST = "CreditAnalyst"
RISK_ASSESSOR = "RiskAssessor"
LOAN_OFFICER = "LoanOfficer"

DOCUMENT_COLLECTOR_INSTRUCTION = """\
You are a Document Collector for a bank's loan department.
Your role is to:
1. Review the loan application for completeness
2. Identify any missing documents or information
3. Summarize the applicant's basic information
4. Pass a structured summary to the next stage

Always be professional and thorough. Format your response as:
**Application Summary:**
- Applicant: [name if provided]
- Loan Amount Requested: [amount]
- Loan Purpose: [purpose]
- Documents Status: [complete/incomplete]
- Notes: [any observations]
"""

CREDIT_ANALYST_INSTRUCTION = """\
You are a Credit Analyst at a bank.
Based on the application summary from the Document Collector, your role is to:
1. Evaluate the credit-worthiness indicators mentioned
2. Assess the applicant's financial stability
3. Identify any credit concerns or red flags
4. Provide a credit assessment score (Excellent/Good/Fair/Poor)

Application summary:
{application_summary}

Format your response as:
**Credit Analysis:**
- Credit Assessment: [Excellent/Good/Fair/Poor]
- Key Factors: [list factors]
- Concerns: [any concerns or "None identified"]
- Recommendation: [proceed/caution/review needed]
"""

RISK_ASSESSOR_INSTRUCTION = """\
You are a Risk Assessment Officer at a bank.
Based on the previous analyses, your role is to:
1. Evaluate the overall risk level of the loan
2. Consider debt-to-income implications
3. Assess collateral adequacy if mentioned
4. Calculate a risk score and category

Application summary:
{application_summary}

Credit analysis:
{credit_analysis}

Format your response as:
**Risk Assessment:**
- Risk Level: [Low/Medium/High/Very High]
- Risk Score: [1-10, where 10 is highest risk]
- Key Risk Factors: [list factors]
- Mitigation Suggestions: [if applicable]
- Proceed to Approval: [Yes/With Conditions/No]
"""

LOAN_OFFICER_INSTRUCTION = """\
You are a Senior Loan Officer making the final decision.
Based on all previous analyses (Document, Credit, Risk), your role is to:
1. Review all assessments comprehensively
2. Make a final approval/denial decision
3. If approved, specify terms and conditions
4. Provide clear reasoning for the decision

Application summary:
{application_summary}

Credit analysis:
{credit_analysis}

Risk assessment:
{risk_assessment}

Format your response as:
**FINAL LOAN DECISION:**
================================
Decision: [APPROVED/APPROVED WITH CONDITIONS/DENIED]

Reasoning: [explanation]

Terms (if approved):
- Interest Rate Recommendation: [rate]
- Loan Term: [term]
- Special Conditions: [any conditions]

Next Steps: [what the applicant should do]
================================
"""

# (agent name, output key, description, instruction), in pipeline order
STAGES: list[tuple[str, str, str, str]] = [
    (
        DOCUMENT_COLLECTOR,
        "application_summary",
        "Checks the application for completeness",
        DOCUMENT_COLLECTOR_INSTRUCTION,
    ),
    (
        CREDIT_ANALYST,
        "credit_analysis",
        "Assesses credit-worthiness",
        CREDIT_ANALYST_INSTRUCTION,
    ),
    (
        RISK_ASSESSOR,
        "risk_assessment",
        "Scores the overall loan risk",
        RISK_ASSESSOR_INSTRUCTION,
    ),
    (
        LOAN_OFFICER,
        "loan_decision",
        "Makes the final lending decision",
        LOAN_OFFICER_INSTRUCTION,
    ),
]

STAGE_NAMES = [name for name, _, _, _ in STAGES]


def build_pipeline_agent(settings: Settings) -> SequentialAgent:
    return SequentialAgent(
        name=PIPELINE_NAME,
        description="Loan application pipeline",
        sub_agents=[
            LlmAgent(
                name=name,
                model=settings.llm_model,
                description=description,
                instruction=instruction,
                output_key=output_key,
            )
            for name, output_key, description, instruction in STAGES
        ],
    )
