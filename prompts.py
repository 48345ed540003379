from schema import Difficulty, Operation

OPERATION_WORDS = {
    Operation.ADD: "addition",
    Operation.SUB: "subtraction",
    Operation.MUL: "multiplication",
    Operation.DIV: "division",
}

SYSTEM_PROMPT = """You write very short, kid-friendly WORD PROBLEMS for 2nd–3rd graders.
Use only the numbers and operation provided. 1–2 short sentences.
No equations in the text; no variables; no extra numbers. One clear final question."""


def build_prompt(op: Operation, a: int, b: int, difficulty: Difficulty) -> str:
    return f"""Create a {OPERATION_WORDS[op]} word problem using ONLY these numbers: {a} and {b}.
- Difficulty: {difficulty.code}
- Requirements:
  - Use the numbers exactly as provided (no new numbers).
  - Make the story wholesome and concrete (stickers, apples, books, coins, marbles, etc.).
  - End with a single question that implies a whole-number answer.
  - Do NOT include the equation or the answer.
Examples of tone: "Kiki has 7 stickers and gets 5 more. How many does she have now?"
"""
