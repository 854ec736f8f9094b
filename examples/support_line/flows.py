"""Flows of the support line defined in Python.

    callflow compile examples/support_line --module flows --output build/

Run from `examples/support_line` (or put it on PYTHONPATH) so `flows` is importable.
Resource addresses come from callflow.yaml next to this file.
"""

from callflow import FlowBuilder, flow


@flow("Survey")
def survey(builder: FlowBuilder) -> None:
    builder.set_attributes(survey="post-call")
    (
        builder.split_percent()
        .bucket(
            20,
            lambda b: b.play_prompt("Please stay on the line for a short survey.").then_continue(),
        )
        .otherwise(lambda b: b.then_continue())
    )
    builder.disconnect()


@flow("Callback")
def callback(builder: FlowBuilder) -> None:
    builder.play_prompt("All our agents are busy.")
    builder.loop(2, lambda b: b.play_prompt("Your call is important to us.").hold(30))
    (
        builder.check_staffing("Support")
        .staffed(lambda b: b.transfer_to_queue("Support"))
        .not_staffed(lambda b: b.then_continue())
    )
    builder.store_input("Enter your phone number and we will call you back.", max_digits=15)
    builder.end_execution()
