"""
Agent loop built on pipelines.
"""

from llm_pipeline.agent.loop import Agent, AgentError, AgentStep

__all__ = ["Agent", "AgentStep", "AgentError"]
