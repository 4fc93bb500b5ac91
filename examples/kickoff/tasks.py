"""Evaluation tasks for the lockstride-kickoff plugin."""

from __future__ import annotations

from plugin_evals import (
    ContextFile,
    OrchestratorAssertion,
    OrchestratorTask,
    Task,
    assertions,
)

brief_generation = Task.model_validate(
    {
        "name": "brief-generation-developer-tools",
        "description": "Generate a business brief for an AI code review startup",
        "trials": 3,
        "input": {
            "execution_mode": "autonomous",
            "document_type": "business-brief",
            "startup_name": "CodeReviewAI",
            "context": (
                "A startup building AI-powered code review tools for enterprise "
                "engineering teams.\n\n"
                "- Target customers: Mid-size tech companies (100-1000 employees)\n"
                "- Core problem: Code reviews are slow, inconsistent, and miss critical issues\n"
                "- Solution: AI that learns team patterns and catches bugs and security issues\n"
                "- Business model: SaaS subscription, per-seat pricing"
            ),
        },
        "graders": [
            {
                "type": "code",
                "checks": {
                    "sections_present": [
                        "Executive Summary",
                        "Problem Statement",
                        "Proposed Solution",
                        "Business Model",
                        "Market Opportunity",
                    ],
                    "min_word_count": 500,
                    "no_placeholder_text": True,
                    "contains": ["code review", "AI", "enterprise"],
                },
            },
            {
                "type": "model",
                "rubric": (
                    "Evaluate the business brief on these dimensions:\n\n"
                    "1. **Specificity** (0-1): Does it describe THIS startup, not generic advice?\n"
                    "2. **Coherence** (0-1): Do problem, solution, and market align logically?\n"
                    "3. **Completeness** (0-1): Are all sections meaningfully filled?\n"
                    "4. **Actionability** (0-1): Are next steps or implications clear?"
                ),
            },
        ],
        "success_criteria": {"model_grader_score": ">= 0.7"},
    }
)

naming_flow = Task.model_validate(
    {
        "name": "naming-flow-inline",
        "description": "Interactive naming session runs inline in the parent context",
        "trials": 2,
        "input": {
            "execution_mode": "interactive",
            "skill": "naming-business",
            "references": ["references/naming-phases.md"],
            "startup_name": "CloudSync Startup",
            "context": (
                "A cloud infrastructure startup building developer tools.\n"
                "Preference: short (1-2 syllables), memorable, .io or .dev domain."
            ),
            "conversation": [
                {"trigger": "naming|exercise|preference|style", "user_message": "1"},
                {
                    "trigger": "Fanciful|Descriptive|style.*prefer",
                    "user_message": "Fanciful/invented. Something unique we can own.",
                },
                {
                    "trigger": "emotion|feel|evoke",
                    "user_message": "Confident, cutting-edge, reliable.",
                },
                {
                    "trigger": "sonic|sound|syllable",
                    "user_message": "Short and punchy. Hard consonants like K, T, P.",
                },
                {
                    "trigger": "constraint|TLD|domain",
                    "user_message": ".io or .dev preferred. Must work internationally.",
                },
                {
                    "trigger": "preferences are correct|ready.*generate|generate.*candidate",
                    "user_message": "Yes, those preferences are correct. Generate candidates.",
                },
            ],
        },
        "graders": [
            {
                "type": "code",
                "checks": {
                    "min_word_count": 200,
                    "no_placeholder_text": True,
                    "contains_questions": True,
                    "min_turns": 3,
                    "contains": ["candidate", "name"],
                    "not_contains": ["[insert", "[your"],
                },
            },
            {
                "type": "model",
                "rubric": (
                    "Evaluate the inline naming flow:\n\n"
                    "1. **Interactive Session** (0-1): Were preferences gathered interactively?\n"
                    "2. **Preference Adherence** (0-1): Do candidates match stated preferences?\n"
                    "3. **Candidate Quality** (0-1): Does each candidate have a rationale?\n"
                    "4. **Response Integration** (0-1): Were user answers incorporated?"
                ),
            },
        ],
        "success_criteria": {"model_grader_score": ">= 0.7"},
    }
)

challenger_business_brief = Task.model_validate(
    {
        "name": "challenger-business-brief-problem-domain",
        "description": "Challenger questions a business brief using problem-domain patterns",
        "trials": 3,
        "input": {
            "execution_mode": "challenger",
            "document_type": "business-brief",
            "startup_name": "PayFlow",
            "fixture": "business-brief-payflow.md",
            "context": "Yes, challenge me on this business brief.",
            "conversation": [
                {
                    "trigger": r"Challenge|\?|problem|pain|evidence|validate",
                    "user_message": (
                        "We interviewed 47 SMB owners. 38 of them said late payments "
                        "caused them to delay payroll at least once in the past year."
                    ),
                },
                {
                    "trigger": r"Challenge|\?|severe|urgent|alternative|workaround",
                    "user_message": (
                        "Factoring costs 3-5% of invoice value and business credit cards "
                        "charge 18-24% APR."
                    ),
                },
                {
                    "trigger": r"Challenge|\?|scope|how many|market|segment",
                    "user_message": (
                        "There are 6.1M businesses in our revenue range; roughly 40% "
                        "experience this problem acutely."
                    ),
                },
            ],
        },
        "graders": [
            {
                "type": "code",
                "checks": {
                    "min_word_count": 150,
                    "no_placeholder_text": True,
                    "contains": ["SKEPTIC MODE"],
                },
            },
            {
                "type": "model",
                "rubric": (
                    "Evaluate the challenger engagement on the business brief:\n\n"
                    "1. **Mode Activation** (0-1): Was SKEPTIC MODE clearly engaged?\n"
                    "2. **Problem Domain Relevance** (0-1): Were challenges specific to the problem?\n"
                    "3. **Response Acknowledgment** (0-1): Were user responses evaluated?\n"
                    "4. **Proper Exit** (0-1): Did the challenger conclude appropriately?"
                ),
                "threshold": 0.6,
            },
        ],
        "success_criteria": {"model_grader_score": ">= 0.6", "min_pass_rate": 0.33},
    }
)

EXPECTED_AGENT = "lockstride-kickoff:business-writer"

business_writer = assertions.tool("Task", subagent_type="business-writer")
gathering_input = assertions.any_of(
    assertions.tool("Skill", skill_name="gathering-input"),
    assertions.tool("Read", file_path="business-brief-input"),
)

orchestration_business_brief = OrchestratorTask(
    name="orchestration-business-brief-flow",
    description=(
        f"generating-documents spawns {EXPECTED_AGENT} with the plugin prefix "
        "after gathering-input completes"
    ),
    trials=3,
    context_files=[
        ContextFile("skills/generating-documents/SKILL.md", "Generating Documents Skill"),
        ContextFile(
            "skills/generating-documents/references/internal-workflow.md",
            "Internal Workflow Reference",
        ),
    ],
    system_instructions=(
        "You are executing the generating-documents skill for a business-brief.\n\n"
        "- The business-brief template requires an interactive input source\n"
        "- Invoke gathering-input first, then spawn the business-writer agent\n"
        "- Configuration has already been resolved and all dependencies are met\n\n"
        "Proceed through the workflow steps as documented."
    ),
    user_message=(
        'Generate business-brief for "TestStartup".\n\n'
        "The startup is building an AI-powered decision matrix for SaaS evaluations.\n"
        "Target market: SMBs doing cross-functional software evaluations.\n\n"
        "Please proceed with the generation workflow."
    ),
    assertions=[
        OrchestratorAssertion(
            "Task tool was called at least once",
            assertions.invoked(assertions.tool("Task")),
        ),
        OrchestratorAssertion(
            f'Task.subagent_type uses plugin prefix "{EXPECTED_AGENT}"',
            assertions.all_match(business_writer, "subagent_type", EXPECTED_AGENT),
        ),
        OrchestratorAssertion(
            "Task(business-writer) called after gathering-input interaction",
            assertions.precedes(gathering_input, business_writer),
        ),
    ],
)

CONTENT_TASKS = [brief_generation, naming_flow, challenger_business_brief]
ORCHESTRATION_TASKS = [orchestration_business_brief]
ALL_TASKS = [*CONTENT_TASKS, *ORCHESTRATION_TASKS]
