from joinx import CompositeList, ListSource, SourceBinding, static_binding

# ------------------------------------------------------------------------------------------------

print()
print("=" * 100)
print("Defining sources")
print("-" * 100)
print()

# A source is any ordered list that can report counts, types and ids.
# ListSource is the ready-made in-memory one.
unread = ListSource(
    ["Welcome!", "Your order shipped", "URGENT: password reset"],
    type_of=lambda subject: "urgent" if subject.startswith("URGENT") else "normal",
    type_tags=("normal", "urgent"),
    id_of=lambda subject: subject.lower(),
    key="unread",
)
read = ListSource(["Newsletter", "Receipt"], key="read")

# A static binding is a single fixed item: a header, a footer, a separator.
header = static_binding(lambda context: "== Inbox ==", type_tag="header")
separator = static_binding(lambda context: "-- read --", type_tag="separator")

# ------------------------------------------------------------------------------------------------

print()
print("=" * 100)
print("Joining them")
print("-" * 100)
print()

# Bindings are concatenated in order. Plain sources are bound with their own type tags.
inbox = CompositeList(header, SourceBinding(unread), separator, read, stable_ids=True)

print(f"{inbox.item_count()} items, {len(inbox.type_table)} global types")
for global_type, entry in enumerate(inbox.type_table):
    print(f"  type {global_type}: binding {entry.binding_index}, local tag {entry.local_tag!r}")


def show(composite):
    for position in range(composite.item_count()):
        holder = composite.render(None, position)
        text = holder if isinstance(holder, str) else holder.item
        print(f"  {position}: [type {composite.global_type_at(position)}] {text}")


show(inbox)

# ------------------------------------------------------------------------------------------------

print()
print("=" * 100)
print("Following changes")
print("-" * 100)
print()

# The host subscribes to the composite; every source change arrives as one "everything changed".
inbox.subscribe(lambda event: print(f"host notified: {event.kind.value}"))

unread.append("URGENT: server down")
read.pop(0)

show(inbox)
print(f"id at position 4: {inbox.id_at(4)!r}")

# Many changes inside a batch reach the host once.
with unread.batch():
    unread.pop(0)
    unread.pop(0)

show(inbox)

# Detach from every source once the composite is no longer needed.
inbox.close()
unread.append("ignored by the closed composite")
print(f"after close: {inbox.item_count()} items")
