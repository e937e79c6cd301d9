import re


class CostGenerator:
	"""Estimate API cost for the chat models used by the inspection service.

	Supported models and their default prices (USD per 1,000 tokens):
	- gpt-4.1: 0.002 (input), 0.008 (output)
	- gpt-4.1-mini: 0.0004 (input), 0.0016 (output)
	- gpt-4o: 0.0025 (input), 0.01 (output)
	- gpt-4o-mini: 0.00015 (input), 0.0006 (output)

	Dated snapshots such as `gpt-4.1-2025-04-14` are priced as their base model.
	"""

	DEFAULT_PRICING = {
		"gpt-4.1": {"input_per_1k": 0.002, "output_per_1k": 0.008},
		"gpt-4.1-mini": {"input_per_1k": 0.0004, "output_per_1k": 0.0016},
		"gpt-4o": {"input_per_1k": 0.0025, "output_per_1k": 0.01},
		"gpt-4o-mini": {"input_per_1k": 0.00015, "output_per_1k": 0.0006},
	}

	_SNAPSHOT_SUFFIX = re.compile(r"-\d{4}-\d{2}-\d{2}$")

	def __init__(self, pricing: dict | None = None):
		self.pricing = pricing or dict(self.DEFAULT_PRICING)

	def base_model(self, model: str) -> str:
		"""Strip a dated snapshot suffix from `model`."""
		return self._SNAPSHOT_SUFFIX.sub("", model.lower())

	def estimate(self, input_tokens: int, output_tokens: int, model: str) -> dict:
		"""Estimate cost for a single API call.

		Raises:
			ValueError: If tokens are negative or model is not supported.
		"""
		if input_tokens < 0 or output_tokens < 0:
			raise ValueError("Token counts must be non-negative integers.")

		base = self.base_model(model)
		if base not in self.pricing:
			raise ValueError(f"Unsupported model '{model}'. Supported: {', '.join(self.pricing.keys())}")

		rates = self.pricing[base]
		input_cost = (input_tokens / 1000.0) * rates["input_per_1k"]
		output_cost = (output_tokens / 1000.0) * rates["output_per_1k"]

		return {
			"model": model,
			"input_tokens": int(input_tokens),
			"output_tokens": int(output_tokens),
			"input_cost": round(input_cost, 8),
			"output_cost": round(output_cost, 8),
			"total_cost": round(input_cost + output_cost, 8),
		}

	def estimate_or_zero(self, usage: dict, model: str) -> dict:
		"""Estimate from a usage dict, returning a zeroed breakdown when pricing is unavailable."""
		input_tokens = int(usage.get("input_tokens") or 0)
		output_tokens = int(usage.get("output_tokens") or 0)
		try:
			return self.estimate(input_tokens=input_tokens, output_tokens=output_tokens, model=model)
		except ValueError:
			return {
				"model": model,
				"input_tokens": input_tokens,
				"output_tokens": output_tokens,
				"input_cost": 0.0,
				"output_cost": 0.0,
				"total_cost": 0.0,
			}
