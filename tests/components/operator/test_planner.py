import numpy as np
import pytest

from karma.motor.components.operator.operator_types import Arm, ArmHint, HandPose
from karma.motor.components.operator.planner import (
    HAND_AXES,
    hand_rotation,
    plan_draw,
    plan_draw2,
    plan_push,
    plan_push2,
    push_contact_position,
)
from karma.motor.configs.constants import motion
from karma.motor.utils.frames import compose, from_axis_angle, make_transform, rotation_about_axis

CENTROID = (-0.3, 0.0, 0.0)


def _tool(tip=(0.15, -0.05, 0.02)):
    frame = rotation_about_axis((0.0, 0.0, -1.0), np.arctan2(-tip[1], tip[0]))
    frame[:3, 3] = tip
    return frame


def _z_axis(pose):
    return pose.transform()[:3, 2]


@pytest.mark.parametrize("theta", [-170.0, -120.0, -45.0, 0.0, 30.0, 90.0, 135.0, 180.0])
def test_push_candidates_face_the_centroid(theta):
    plan = plan_push(CENTROID, theta, 0.1)
    c = np.array(CENTROID)

    np.testing.assert_allclose(plan.inward.pose.position, plan.outward.pose.position, atol=1e-12)
    assert np.linalg.norm(plan.inward.pose.position - c) == pytest.approx(0.1)

    radial = (c - plan.inward.pose.position) / 0.1
    np.testing.assert_allclose(_z_axis(plan.inward.pose), radial, atol=1e-9)
    np.testing.assert_allclose(_z_axis(plan.outward.pose), -radial, atol=1e-9)


def test_push_at_zero_starts_on_the_right_of_the_centroid():
    plan = plan_push(CENTROID, 0.0, 0.1)
    np.testing.assert_allclose(plan.inward.pose.position, [-0.3, 0.1, 0.0], atol=1e-12)
    assert plan.theta_deg == pytest.approx(0.0)


def test_push_offset_twin_moves_radially():
    plan = plan_push(CENTROID, 60.0, 0.1)
    for candidate in plan.candidates:
        distance = np.linalg.norm(candidate.offset_pose.position - np.array(CENTROID))
        assert distance == pytest.approx(0.1 + motion.PUSH_EPSILON)
        np.testing.assert_allclose(
            from_axis_angle(candidate.offset_pose.orientation)[:3, :3],
            from_axis_angle(candidate.pose.orientation)[:3, :3],
            atol=1e-9,
        )


@pytest.mark.parametrize("theta", [10.0, 45.0, 80.0, -30.0])
def test_push_positions_are_symmetric_about_the_sagittal_plane(theta):
    left = plan_push(CENTROID, theta, 0.12).inward.pose.position
    mirrored = plan_push(CENTROID, 180.0 - theta, 0.12).inward.pose.position
    np.testing.assert_allclose(mirrored, left * np.array([1.0, -1.0, 1.0]), atol=1e-12)


def test_push_with_tool_puts_the_tip_on_the_tool_free_target():
    tool = _tool()
    bare = plan_push(CENTROID, 40.0, 0.1)
    tooled = plan_push(CENTROID, 40.0, 0.1, tool)
    for bare_candidate, candidate in zip(bare.candidates, tooled.candidates):
        np.testing.assert_allclose(compose(candidate.pose.transform(), tool), bare_candidate.transform, atol=1e-9)


def test_plan_theta_is_normalized():
    assert plan_push(CENTROID, 270.0, 0.1).theta_deg == pytest.approx(-90.0)


@pytest.mark.parametrize("tip", [(0.0, 0.0, 0.0), (0.15, -0.05, 0.02)])
def test_contact_position_brings_the_tip_to_the_centroid(tip):
    tool = _tool(tip)
    orientation = plan_push(CENTROID, 20.0, 0.1, tool).inward.pose.orientation
    x = push_contact_position(CENTROID, orientation, tool)
    tip_world = from_axis_angle(orientation, x) @ np.append(tool[:3, 3], 1.0)
    np.testing.assert_allclose(tip_world[:3], CENTROID, atol=1e-12)


def test_draw_on_the_sagittal_plane():
    plan = plan_draw(CENTROID, 90.0, 0.1, 0.2)
    assert plan.arm is Arm.RIGHT
    np.testing.assert_allclose(plan.approach.position, [-0.4, 0.0, 0.0], atol=1e-12)
    np.testing.assert_allclose(plan.act.position, [-0.2, 0.0, 0.0], atol=1e-12)
    np.testing.assert_allclose(plan.approach.transform()[:3, :3], HAND_AXES, atol=1e-9)
    np.testing.assert_allclose(plan.act.transform()[:3, :3], HAND_AXES, atol=1e-9)


def test_draw_picks_arm_on_the_side_of_the_approach():
    assert plan_draw(CENTROID, 0.0, 0.1, 0.1).arm is Arm.RIGHT
    assert plan_draw(CENTROID, 180.0, 0.1, 0.1).arm is Arm.LEFT
    assert plan_draw(CENTROID, 0.0, 0.1, 0.1, arm_hint=ArmHint.LEFT).arm is Arm.LEFT


def test_draw_reprojection_off_the_sagittal_plane():
    centroid = (-0.3, 0.1, 0.05)
    sagittal = plan_draw((-0.3, 0.0, 0.05), 90.0, 0.1, 0.2)
    plan = plan_draw(centroid, 90.0, 0.1, 0.2)

    np.testing.assert_allclose(plan.approach.position, sagittal.approach.position + [0.0, 0.1, 0.0], atol=1e-12)
    np.testing.assert_allclose(plan.act.position, sagittal.act.position + [0.0, 0.1, 0.0], atol=1e-12)

    expected = rotation_about_axis((0.0, 0.0, -1.0), np.arctan2(0.1, 0.3))[:3, :3] @ HAND_AXES
    np.testing.assert_allclose(plan.approach.transform()[:3, :3], expected, atol=1e-9)


def test_draw_with_tool():
    tool = _tool()
    bare = plan_draw(CENTROID, 90.0, 0.1, 0.2)
    tooled = plan_draw(CENTROID, 90.0, 0.1, 0.2, tool_frame=tool)
    np.testing.assert_allclose(compose(tooled.act.transform(), tool), bare.act.transform(), atol=1e-9)


def test_hand_pose_table():
    np.testing.assert_allclose(
        hand_rotation(Arm.RIGHT, HandPose.NEUTRAL), hand_rotation(Arm.LEFT, HandPose.NEUTRAL)
    )
    assert not np.allclose(hand_rotation(Arm.RIGHT, HandPose.PRONATION), hand_rotation(Arm.LEFT, HandPose.PRONATION))
    for arm in Arm:
        for pose in HandPose:
            r = hand_rotation(arm, pose)
            np.testing.assert_allclose(r @ r.T, np.eye(3), atol=1e-12)
            assert np.linalg.det(r) == pytest.approx(1.0)


def test_push2_sweeps_across_the_centroid():
    waypoints = plan_push2(HandPose.NEUTRAL, CENTROID, 30.0, 0.1, Arm.RIGHT)
    assert len(waypoints) == 4
    above, start, end, lift = waypoints
    c = np.array(CENTROID)

    np.testing.assert_allclose(above.position, start.position + [0.0, 0.0, 0.1], atol=1e-12)
    np.testing.assert_allclose(lift.position, end.position + [0.0, 0.0, 0.1], atol=1e-12)
    np.testing.assert_allclose((start.position + end.position) / 2.0, c, atol=1e-12)
    assert np.linalg.norm(start.position - c) == pytest.approx(0.1)

    rotation = hand_rotation(Arm.RIGHT, HandPose.NEUTRAL)
    for pose in waypoints:
        np.testing.assert_allclose(pose.transform()[:3, :3], rotation, atol=1e-9)


def test_push2_object_frame_is_unrotated():
    start = plan_push2(HandPose.PRONATION, CENTROID, 0.0, 0.1, Arm.LEFT)[1]
    np.testing.assert_allclose(start.position, [-0.2, 0.0, 0.0], atol=1e-12)


def test_draw2_matches_shifted_draw_positions():
    plan2 = plan_draw2(HandPose.NEUTRAL, CENTROID, 90.0, 0.1, 0.2, Arm.RIGHT)
    reference = plan_draw(CENTROID, 0.0, 0.1, 0.2)
    np.testing.assert_allclose(plan2.approach.position, reference.approach.position, atol=1e-12)
    np.testing.assert_allclose(plan2.act.position, reference.act.position, atol=1e-12)
    np.testing.assert_allclose(
        plan2.approach.transform()[:3, :3], hand_rotation(Arm.RIGHT, HandPose.NEUTRAL), atol=1e-9
    )


def test_draw2_reprojection_only_translates():
    centroid = (-0.3, -0.1, 0.0)
    plan2 = plan_draw2(HandPose.PRONATION, centroid, 90.0, 0.1, 0.2, Arm.LEFT)
    sagittal = plan_draw2(HandPose.PRONATION, (-0.3, 0.0, 0.0), 90.0, 0.1, 0.2, Arm.LEFT)
    assert plan2.arm is Arm.LEFT
    np.testing.assert_allclose(plan2.approach.position, sagittal.approach.position + [0.0, -0.1, 0.0], atol=1e-12)
    np.testing.assert_allclose(
        plan2.approach.transform()[:3, :3], make_transform(hand_rotation(Arm.LEFT, HandPose.PRONATION))[:3, :3],
        atol=1e-9,
    )
