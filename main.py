from lazy import ONES, cons, count_from, empty, of, unfold
from models import TraceConfig
from utils import setup_logging

setup_logging()
trace = TraceConfig(enabled=True, level="INFO")


def noisy(label, value):
    # shows when a thunk actually runs
    print(f"  evaluating {label}")
    return value


print("\n--- Demo: basics ---")
a = of(1, 2, 3)
print(f"Fresh stream (only evaluated cells are shown): {a!r}")
print(f"to_list_recursive: {a.to_list_recursive()}")
print(f"After materializing: {a!r}")

print("\n--- Demo: to_list variants with tracing ---")
a = of(1, 2, 3)
print(a.to_list_recursive(trace))
print(a.to_list(trace))

print("\n--- Demo: take with tracing ---")
a = of(1, 2, 3, 4, 5, 6, 7, 8, 9, 10)
print("printing out a.take(1).to_list()")
print(a.take(1, trace).to_list())
print("printing out a.take(6).to_list()")
print(a.take(6, trace).to_list())

print("\n--- Demo: fold_right ---")
s = of(1, 2, 3, 4, 5, 6)
print(s.fold_right("", lambda x, rest: f"{x}, {rest()}"))
print("Ignoring the folded tail stops after the head:")
print(s.fold_right("", lambda x, _rest: f"{x}, "))

print("\n--- Demo: for_all stops at the first failure ---")
print(of(1, 2, 3, 4, 5, 6).for_all(lambda x: x < 3, trace))

print("\n--- Demo: memoized cells ---")
s = cons(lambda: noisy("head", 42), lambda: cons(lambda: noisy("second", 43), empty))
print("Constructed. Nothing evaluated yet.")
print(f"head twice: {s.head()} {s.head()}")
print(f"to_list twice: {s.to_list()} {s.to_list()}")

print("\n--- Demo: infinite streams ---")
print(f"ONES.take(5): {ONES.take(5).to_list()}")
print(f"ONES.exists(x == 1): {ONES.exists(lambda x: x == 1)}")
print(f"count_from(10).take(5): {count_from(10).take(5).to_list()}")
fibs = unfold((0, 1), lambda state: (state[0], (state[1], state[0] + state[1])))
print(f"fibs.take(10): {fibs.take(10).to_list()}")
print(f"First fib over 1000: {fibs.find(lambda x: x > 1000)}")

print("\n--- Demo: take_while two ways ---")
s = count_from(1)
print(s.take_while(lambda x: x < 6).to_list())
print(s.take_while_via_fold(lambda x: x < 6).to_list())

print("\n--- Demo: transformations ---")
evens_squared = count_from(1).filter(lambda x: x % 2 == 0).map(lambda x: x * x)
print(f"Even squares: {evens_squared.take(5).to_list()}")
print(f"Append: {of(1, 2).append(lambda: of(3, 4)).to_list()}")
print(f"Flat map: {of(1, 2, 3).flat_map(lambda x: of(x, x * 10)).to_list()}")
print(f"starts_with: {count_from(1).starts_with(of(1, 2, 3))}")
print(f"head_option of empty: {empty().head_option()}")
