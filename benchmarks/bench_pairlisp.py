#!/usr/bin/env python3
"""
pairlisp Benchmark Suite - lexer, parser and evaluator throughput
"""

import time

from pairlisp import Evaluator, Lexer, Parser, make_environment

HUNDRED_THOUSAND = 100_000
TEN_THOUSAND = 10_000

def now_ms():
    return time.perf_counter() * 1000

def nested_sum(depth):
    # (+ 1 (+ 1 (+ 1 ... 0)))
    return "(+ 1 " * depth + "0" + ")" * depth

# 1. Raw lexing
def bench_lex():
    data = b"(add 12 foo \"str\" 'q) ; comment\n" * HUNDRED_THOUSAND
    lexer = Lexer()
    start = now_ms()
    count = len(lexer.feed(data))
    end = now_ms()
    print(f"1. Lex ({len(data)} bytes):  {end - start:8.2f} ms  (tokens={count})")

# 2. Parsing flat lists
def bench_parse_flat():
    source = "(" + " ".join(str(i) for i in range(TEN_THOUSAND)) + ")\n"
    start = now_ms()
    exprs = list(Parser(source * 10))
    end = now_ms()
    print(f"2. Parse flat (1e5 atoms):  {end - start:8.2f} ms  (exprs={len(exprs)})")

# 3. Evaluating nested sums
def bench_eval_nested():
    tree = Parser(nested_sum(200)).parse_expression()
    evaluator = Evaluator(make_environment())
    start = now_ms()
    for _ in range(1000):
        result = evaluator.eval(tree)
    end = now_ms()
    print(f"3. Eval nested (1e3 x 200): {end - start:8.2f} ms  (result={result.value})")

if __name__ == "__main__":
    print("=== pairlisp Benchmark Suite ===\n")

    bench_lex()
    bench_parse_flat()
    bench_eval_nested()

    print("\n=== Done ===")
